"""
Text generation gateway package.

Provides:
- One request/response contract over several LLM providers (Gemini, OpenAI-compatible)
- Model fallback for providers exposing several models
- Hosting via a standalone FastAPI server or a serverless (AWS Lambda) function
"""
