"""PDF learning assistant: Gemini-backed summaries, study plans and quizzes."""
__version__ = "0.1.0"
