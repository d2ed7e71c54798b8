"""
RUN SCRIPT - Start the J.A.R.V.I.S voice relay
==============================================

PURPOSE:
  Single entry point to start the backend.

WHAT IT DOES:
  - Imports the FastAPI app from app.main.
  - Runs it with uvicorn on HOST/PORT from config.py (default 0.0.0.0:5000).

USAGE:
  python run.py

  Then point the voice front end at http://localhost:5000, or try the
  console client: python test.py
  API docs: http://localhost:5000/docs

NOTE:
  Before running, set GROQ_API_KEY in .env. Without it the server still starts,
  but /ask answers with a configuration error.
"""

import uvicorn

from config import HOST, PORT

# ------------------------------------------------------------------------------
# ENTRY POINT
# ------------------------------------------------------------------------------
if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",   # String path to the FastAPI app instance (module:variable).
        host=HOST,        # 0.0.0.0 listens on all interfaces so phones on the LAN can connect.
        port=PORT,
    )
