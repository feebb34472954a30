"""
Start the tweetlate API server
"""
import os

import uvicorn
from dotenv import load_dotenv

from tweetlate.utils.logger import setup_logging

# Load environment variables
load_dotenv()
setup_logging()

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    print("\n" + "=" * 60)
    print("Starting tweetlate API Server")
    print("=" * 60)
    print(f"URL: http://localhost:{port}")
    print(f"Docs: http://localhost:{port}/docs")
    print("=" * 60 + "\n")

    uvicorn.run(
        "tweetlate.api.app:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("API_RELOAD", "false").lower() == "true",
        log_level="info",
    )
