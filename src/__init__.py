"""
Source root for the hotel services sync project.
`src.sync` holds the projection logic, `src.api` the HTTP surface, and `src.common` shared settings and store plumbing.
"""
