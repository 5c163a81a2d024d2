"""
Run the Market Digest server.
"""
import logging
import os
import sys

# Set working directory and path
project_dir = os.path.dirname(os.path.abspath(__file__))
os.chdir(project_dir)
sys.path.insert(0, project_dir)

# Load environment
from dotenv import load_dotenv
load_dotenv(os.path.join(project_dir, ".env"))

# Run uvicorn
import uvicorn

if __name__ == "__main__":
    from market_digest.core.config import get_settings
    settings = get_settings()
    host, port = settings.host, settings.port

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("Starting Market Digest Server...")
    print(f"Working directory: {project_dir}")
    print(f"API Docs: http://localhost:{port}/docs")
    print("-" * 50)

    uvicorn.run(
        "market_digest.main:app",
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
