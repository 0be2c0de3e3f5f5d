"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Send single-prompt completions on behalf of the neighborhood pipeline.
- Extract JSON payloads from untrusted model text, reporting failures as
  values instead of exceptions.
"""
