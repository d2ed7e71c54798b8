"""
J.A.R.V.I.S VOICE RELAY PACKAGE
===============================

This directory is the main Python package for the voice relay backend:

  from app.main import app, create_app
  from app.models import AskRequest
  from app.services.ask_service import AskService, AppContext

FILE STRUCTURE:
  app/
    __init__.py   - This file; marks 'app' as a package.
    main.py       - FastAPI app, lifespan and HTTP endpoints (/ask, /history, /health, ...).
    models.py     - Pydantic models for API bodies and the conversation log.
    services/     - The /ask pipeline: admission, validation, prompt, Groq, history.
    utils/        - Text cleaning for user input and model replies.
"""
