"""HTTP boundary: FastAPI app, routers, cookies and error mapping."""
