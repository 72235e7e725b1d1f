"""conftest.py
Add command line parsing and shared editor fixtures to pytest.
"""

import pytest
from canvas_cv.logging import LoggerFactory
from canvas_cv.conftest_helpers import apply_mock_llm_patch
from canvas_cv.editor_session import EditorSession
from canvas_cv.store.id_generator import IdGenerator
from canvas_cv.store.resume_store import ResumeStore
from canvas_cv.test_helpers.fake_generative_service import FakeGenerativeTextService

# --------------------------------------------------------------
# SETUP TEST LOGGING
# --------------------------------------------------------------

# Integrate logger with pytest
logger = LoggerFactory().get_logger(
    name="pytest_logger",
    logger_type="pytest",
    console=True
)
current_class = None

@pytest.hookimpl(tryfirst=True)
def pytest_sessionstart(session):
    """Session start header."""
    logger.info("==== PYTEST SESSION START ====")

@pytest.hookimpl(tryfirst=True)
def pytest_runtest_logstart(nodeid, location):
    """Called at the start of each test."""
    global current_class
    class_name = location[0]
    if class_name != current_class:
        current_class = class_name
        logger.info(f"\n---- TestClass: {current_class} ----")

@pytest.hookimpl(tryfirst=True)
def pytest_runtest_logreport(report):
    """Called at the end of each test phase (setup/call/teardown)."""
    if report.when != "call":
        return  # only care about the main call, not setup/teardown

    status = report.outcome.upper()  # PASSED / FAILED / SKIPPED
    if status == "PASSED":
        logger.info(f"PASSED: {report.nodeid}")
    elif status == "FAILED":
        logger.error(f"FAILED: {report.nodeid}\n{report.longreprtext}")
    elif status == "SKIPPED":
        logger.warning(f"SKIPPED: {report.nodeid}\n{report.longreprtext}")

@pytest.hookimpl(tryfirst=True)
def pytest_sessionfinish(session, exitstatus):
    """Session finish footer."""
    logger.info(f"==== PYTEST SESSION END: exitstatus={exitstatus} ====")


# --------------------------------------------------------------
# SETUP RUN ARGUMENT PARSING
# --------------------------------------------------------------
def pytest_addoption(parser):
    """
    Register a command-line option for selecting the LLM test mode.

    Example usage:
        # Run tests with stubbed LLM responses (default)
        pytest

        # Run tests that make a small number of live LLM calls
        pytest --llm-mode=basic_only

        # Run all live LLM tests
        pytest --llm-mode=full
    """
    parser.addoption(
        "--llm-mode",
        action="store",
        default="mock_only",
        choices=["mock_only", "basic_only", "full"],
        help=(
            "Set the LLM test mode for pytest. Options:\n"
            "  'mock_only' (default): Use stubbed/mock responses.\n"
            "  'basic_only': Run a minimal subset of live LLM tests.\n"
            "  'full': Run all live LLM tests."
        ),
    )

@pytest.fixture(scope="session")
def LLM_TEST_MODE(request):
    """
    Sets LLM test mode detected in pytest_addoption to LLM_TEST_MODE
    fixture variable.

    Returns:
        str: One of 'mock_only', 'basic_only', 'full'.
    """
    return request.config.getoption("--llm-mode")



@pytest.fixture(autouse=False)
def FORCE_MOCK_LLM_RESPONSES(monkeypatch):
    """
    Always build GenerativeTextService instances in test mode (canned responses).

    Scope:
      - Per test function or per test class (via `@pytest.mark.usefixtures`).

    Usage:
      - Class-level:
        ```
        @pytest.mark.usefixtures("FORCE_MOCK_LLM_RESPONSES")
        class TestRewriteEndpoints:
            ...
        ```
      - Function-level:
        ```
        def test_example(FORCE_MOCK_LLM_RESPONSES):
            ...
        ```

    This fixture applies the patch **unconditionally** and is ideal for
    files/tests that should never make live LLM calls.
    """
    apply_mock_llm_patch(monkeypatch)
    yield


@pytest.fixture
def USE_MOCK_LLM_RESPONSE_SETTING(monkeypatch, LLM_TEST_MODE):
    """
    Conditionally enable mock LLM responses based on `LLM_TEST_MODE`.

    Behavior:
      - Applies `apply_mock_llm_patch` unless `LLM_TEST_MODE == "full"`.
      - Otherwise, services keep their default (live) behavior.
    """
    # Apply patch for all settings EXCEPT LLM_TEST_MODE == "full"
    if LLM_TEST_MODE != "full":
        apply_mock_llm_patch(monkeypatch)
    yield


# --------------------------------------------------------------
# EDITOR FIXTURES
# --------------------------------------------------------------
@pytest.fixture
def store():
    """Seed document with deterministic generated ids."""
    return ResumeStore(id_generator=IdGenerator(session_token="test"))


@pytest.fixture
def fake_service():
    return FakeGenerativeTextService()


@pytest.fixture
def session(store, fake_service):
    """EditorSession on the seed document with a near-zero suggestion debounce."""
    editor_session = EditorSession(store=store, service=fake_service, debounce_seconds=0.01)
    yield editor_session
    editor_session.close()
