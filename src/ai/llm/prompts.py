"""
LLM Prompt Templates

Prompts for the game assistant: hints, character facts and distinguishing
questions.
"""

# === Hints ===

HINT_SYSTEM = """You are a friendly helper in a game of Twenty Questions.
The player is thinking of a character and the game is asking yes/no questions.
Help the player decide how to answer the current question about THEIR character.
Never guess the character yourself. Keep it to one or two short sentences."""

HINT_PROMPT = """Questions answered so far:
{history}

Current question: "{question}"

Give the player a short hint about what this question is really asking and
which kinds of characters would be a "yes"."""

HINT_SCHEMA = {
    "hint": "str"
}


# === Facts ===

FACT_SYSTEM = """You are a trivia expert on fictional and real characters.
Share one fun, accurate, family-friendly fact. No spoilers beyond common knowledge."""

FACT_PROMPT = """Tell me one fun fact about {answer}.

Keep it under 40 words."""

FACT_SCHEMA = {
    "fact": "str"
}


# === Distinguishing Questions ===

QUESTION_SYSTEM = """You write yes/no questions for a Twenty Questions game tree.
A good question is short, objective and answerable by anyone who knows the characters."""

QUESTION_PROMPT = """The game guessed "{old_answer}" but the player was thinking of "{new_answer}".

Questions already answered on the way here:
{history}

Write ONE yes/no question whose answer is "yes" for {new_answer} and "no" for {old_answer}.
Do not repeat a question that was already asked and do not name either character."""

QUESTION_SCHEMA = {
    "question": "str"
}


def format_history(history: list[tuple[str, bool]]) -> str:
    """Render (question, answer) pairs as a bullet list."""
    if not history:
        return "(none yet)"
    return "\n".join(
        f"- {question} -> {'yes' if choice else 'no'}"
        for question, choice in history
    )
