"""Model Gateway layer.

One interface for invoking a single model with a single prompt:
  - ModelGateway protocol (``query(model_id, prompt) -> ModelResponse``)
  - OpenRouterGateway: OpenAI-compatible chat completions with retries
  - MockGateway: offline canned responses for development without API keys
"""
