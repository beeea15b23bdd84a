# Request-scoped services that sit between routers and the sync layer.
