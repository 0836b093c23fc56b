from statline import create_app
import os

# Create app instance for compatibility with gunicorn
app = create_app()

if __name__ == "__main__":
    debug_mode = os.getenv("FLASK_DEBUG", "false").lower() == "true"
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "5001"))

    app.logger.info(f"Starting statline on {host}:{port}, debug={debug_mode}")
    # The reloader would start a second set of worker threads
    app.run(debug=debug_mode, host=host, port=port, use_reloader=False)
