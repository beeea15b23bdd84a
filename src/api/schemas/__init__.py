# Pydantic request and response models for the hotel sync API.
