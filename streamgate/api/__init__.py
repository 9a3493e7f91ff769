"""HTTP transport: dependencies, exception handlers and versioned routers."""
