"""Unit tests for timing utilities."""

import asyncio
import logging
from unittest.mock import MagicMock, patch

import pytest

from htmldistill.timing import timeit

EXPECTED_SUM_RESULT = 5  # 2 + 3


class TestTimeit:
    """Test timeit decorator."""

    @patch("htmldistill.timing.logger")
    def test_timeit_sync_function(self, mock_logger: MagicMock) -> None:
        """Test timeit decorator with synchronous function."""
        @timeit()
        def add(a: int, b: int) -> int:
            return a + b

        assert add(2, 3) == EXPECTED_SUM_RESULT

        mock_logger.log.assert_called_once()
        args = mock_logger.log.call_args[0]
        assert args[0] == logging.DEBUG
        assert args[1] == "%s took %.4f seconds"
        assert args[2].endswith("add")
        assert isinstance(args[3], float)

    @pytest.mark.asyncio
    @patch("htmldistill.timing.logger")
    async def test_timeit_async_function(self, mock_logger: MagicMock) -> None:
        """Test timeit decorator with asynchronous function."""
        @timeit()
        async def add_later(a: int, b: int) -> int:
            await asyncio.sleep(0)
            return a + b

        assert await add_later(2, 3) == EXPECTED_SUM_RESULT
        mock_logger.log.assert_called_once()

    @patch("htmldistill.timing.logger")
    def test_timeit_custom_name_and_level(self, mock_logger: MagicMock) -> None:
        """Test timeit decorator with custom name and log level."""
        @timeit(name="Pruning filter", log_level=logging.INFO)
        def noop() -> None:
            return None

        noop()

        args = mock_logger.log.call_args[0]
        assert args[0] == logging.INFO
        assert args[2] == "Pruning filter"

    @patch("htmldistill.timing.logger")
    def test_timeit_preserves_function_metadata(self, mock_logger: MagicMock) -> None:
        """Test that timeit preserves function metadata via @wraps."""
        @timeit()
        def documented() -> None:
            """Docstring survives."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring survives."

    @patch("htmldistill.timing.logger")
    def test_timeit_sync_with_exception(self, mock_logger: MagicMock) -> None:
        """Test timeit still logs when a sync function raises."""
        @timeit(name="Failing sync function")
        def fail() -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            fail()
        mock_logger.log.assert_called_once()

    @pytest.mark.asyncio
    @patch("htmldistill.timing.logger")
    async def test_timeit_async_with_exception(self, mock_logger: MagicMock) -> None:
        """Test timeit still logs when an async function raises."""
        @timeit(name="Failing async function")
        async def fail() -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await fail()
        mock_logger.log.assert_called_once()
