import uvicorn

if __name__ == "__main__":
    config = uvicorn.Config(
        "rental_service.app.main:app",
        host="0.0.0.0",
        port=8003,
        reload=True,
    )
    server = uvicorn.Server(config)
    try:
        server.run()
    except KeyboardInterrupt:
        print("\nShutting down server...")
