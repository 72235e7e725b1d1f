"""conftest_helpers.py
Helper functions for `tests/conftest.py`
"""

from canvas_cv.ai.generative_text_service import GenerativeTextService


# --------------------------------------------------------------
# SETUP MONKEYPATCH FIXTURES
# --------------------------------------------------------------
def apply_mock_llm_patch(monkeypatch, response_type: str = "success"):
    """
    Core patching logic for GenerativeTextService.

    Forces every service to build its LLM clients in test mode by default:
      - `test_mode=True`
      - `test_response_type` set to `response_type` ("success" unless given)

    With test mode on the clients return the canned responses from
    `canvas_cv/test_helpers/llm_client_test_helpers.py` and never call a provider.

    Notes:
      - Intended to be called from a fixture to control scope.
      - Does not yield; directly applies the monkeypatch.
      - Explicit keyword arguments passed by a test still win.
    """
    original_init = GenerativeTextService.__init__

    def patched_init(self, *args, **kwargs):
        kwargs.setdefault("test_mode", True)
        kwargs.setdefault("test_response_type", response_type)
        original_init(self, *args, **kwargs)

    monkeypatch.setattr(GenerativeTextService, "__init__", patched_init)
