"""
JARVIS CONSOLE CLIENT - Live and Record Mode
============================================

PURPOSE:
A command-line client for talking to the voice relay without a voice front end.
Type what you would have said; the reply is printed instead of spoken.

USAGE:
    python test.py

    Make sure the server is running first: python run.py

COMMANDS:
    1 - Switch to Live mode (short questions, up to 25 words, 1-3 sentence answers)
    2 - Switch to Record mode (longer questions, fuller answers)
    /name <name> - Tell Jarvis what to call you
    /history - View the most recent exchanges (newest first)
    /clear - Clear the server's conversation history
    /quit or /exit - Exit

NOTE:
The server throttles each client: 5 questions per minute and at least
3 seconds between questions. Going faster returns a "wait" reply.
"""

import os

import requests

try:
    from config import ASSISTANT_NAME
except ImportError:
    ASSISTANT_NAME = "Jarvis"


# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------
BASE_URL = os.getenv("JARVIS_URL", "http://localhost:5000")
USER_NAME = None
CURRENT_MODE = "live"


# -----------------------------------------------------------------------------
# UI HELPERS
# -----------------------------------------------------------------------------

def print_header():
    print("\n" + "=" * 60)
    print("J.A.R.V.I.S - Voice Relay Console")
    print("=" * 60)
    print("\nModes:")
    print("  1 = Live (short questions, short answers)")
    print("  2 = Record (longer questions)")
    print("\nCommands:")
    print("  /name <name> - Set your name")
    print("  /history - See recent exchanges")
    print("  /clear - Clear history on the server")
    print("  /quit - Exit")
    print("=" * 60 + "\n")


def get_user_input():
    try:
        return input("\nYou: ").strip()
    except (KeyboardInterrupt, EOFError):
        return None


# -----------------------------------------------------------------------------
# API CALLS
# -----------------------------------------------------------------------------

def send_message(text, mode):
    """
    POST the text to /ask and return the reply.

    The server answers errors with the same {"reply": ...} body as successes,
    so the reply is shown whatever the status code.
    """
    payload = {"text": text, "mode": mode}
    if USER_NAME:
        payload["userName"] = USER_NAME

    try:
        response = requests.post(f"{BASE_URL}/ask", json=payload, timeout=30)
        try:
            reply = response.json().get("reply")
        except ValueError:
            reply = None
        if reply is None:
            return f"Error: {response.status_code} - {response.text}"
        if response.status_code != 200:
            return f"[{response.status_code}] {reply}"
        return reply
    except requests.exceptions.ConnectionError:
        return "Cannot connect to backend. Start it with: python run.py"
    except requests.exceptions.Timeout:
        return "Request timed out."


def get_history():
    try:
        response = requests.get(f"{BASE_URL}/history", timeout=10)
        if response.status_code != 200:
            return "Could not retrieve history"
        history = response.json().get("history", [])
        if not history:
            return "No conversation history yet"

        output = f"\nRecent history ({len(history)} exchanges, newest first):\n"
        output += "-" * 60 + "\n"
        for i, item in enumerate(history, 1):
            output += f"{i}. You: {item.get('user', '')}\n"
            output += f"   {ASSISTANT_NAME}: {item.get('ai', '')}\n"
        output += "-" * 60 + "\n"
        return output
    except requests.exceptions.RequestException as e:
        return f"Error retrieving history: {e}"


def clear_history():
    try:
        response = requests.get(f"{BASE_URL}/clear-history", timeout=10)
        return response.json().get("message", "History cleared")
    except requests.exceptions.RequestException as e:
        return f"Error clearing history: {e}"


# -----------------------------------------------------------------------------
# MAIN LOOP
# -----------------------------------------------------------------------------

def main():
    global USER_NAME, CURRENT_MODE

    print_header()
    print("Live mode is on. Type a question, or 2 for Record mode.\n")

    while True:
        user_input = get_user_input()
        if user_input is None or user_input in ["/quit", "/exit"]:
            print("\nGoodbye!")
            break

        if user_input == "1":
            CURRENT_MODE = "live"
            print("Switched to LIVE mode\n")
            continue
        if user_input == "2":
            CURRENT_MODE = "record"
            print("Switched to RECORD mode\n")
            continue
        if user_input == "/history":
            print(get_history())
            continue
        if user_input == "/clear":
            print(clear_history())
            continue
        if user_input.startswith("/name"):
            USER_NAME = user_input[len("/name"):].strip() or None
            print(f"{ASSISTANT_NAME} will call you {USER_NAME or 'friend'}.")
            continue
        if user_input.startswith("/"):
            print(f"Unknown command: {user_input}")
            continue
        if not user_input:
            continue

        print(f"{ASSISTANT_NAME} ({CURRENT_MODE}): ", end="", flush=True)
        print(send_message(user_input, CURRENT_MODE))


if __name__ == "__main__":
    main()
