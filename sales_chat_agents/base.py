"""
Base class shared by the Claude-powered agents.
"""

import os

import anthropic

from .config import Config

DEFAULT_MODEL = Config.MODEL


class LLMBaseAgent:
    """Base class for all Claude-powered agents."""

    def __init__(self, model=DEFAULT_MODEL, max_tokens=Config.LLM_MAX_TOKENS,
                 timeout=Config.LLM_TIMEOUT_SECONDS, max_retries=Config.LLM_MAX_RETRIES):
        api_key = os.getenv('ANTHROPIC_API_KEY')
        if not api_key or api_key == 'your_api_key_here':
            raise ValueError(
                "ANTHROPIC_API_KEY environment variable not set. "
                "Get your key at https://console.anthropic.com/settings/keys"
            )
        self.client = anthropic.Anthropic(api_key=api_key, timeout=float(timeout), max_retries=max_retries)
        self.model = model
        self.max_tokens = max_tokens

    def call_api(self, system_prompt, messages, return_full_response=False):
        """
        Call Claude API.

        Args:
            system_prompt: System prompt string
            messages: List of {"role": "user"|"assistant", "content": "..."} dicts
            return_full_response: If True, return full response object; otherwise return text

        Returns:
            Response text string, or full response object if return_full_response=True

        Raises:
            RuntimeError: the request failed, timed out or returned no text
        """
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt,
                messages=messages
            )
        except anthropic.APIError as e:
            raise RuntimeError(f"Claude API error: {str(e)}")
        if return_full_response:
            return response
        if not response.content or not getattr(response.content[0], 'text', None):
            raise RuntimeError("Claude API error: empty response")
        return response.content[0].text
