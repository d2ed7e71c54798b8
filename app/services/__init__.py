"""
SERVICES PACKAGE
=================

Business logic lives here. The API layer (app.main) calls these services;
they don't handle HTTP, only the /ask pipeline and its state.

MODULES:
    admission         - RateLimiter + CooldownGate behind one AdmissionController
    input_validator   - Ordered rule chain that rejects noise before Groq is called
    prompt_builder    - Jarvis persona prompt per user name and mode
    completion_client - Groq call through LangChain, with distinct failure types
    conversation_log  - In-memory, time-pruned history of exchanges
    ask_service       - AppContext + AskService: the whole pipeline in order
"""
