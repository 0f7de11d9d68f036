# tests/core/test_config.py

import logging
import os
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

import pytest
from pydantic import ValidationError as PydanticValidationError

from medintake.core.config import Settings, validate_settings
from medintake.core.exceptions import ConfigurationError
from medintake.core.evaluators import KeywordConfidenceScorer, RandomConfidenceScorer
from medintake.core.flow_engine import build_evaluators, create_workflow_engine
from medintake.core.logging_config import setup_logging
from medintake.models.flow_models import WorkflowKind


class TestSettings:

    def test_defaults(self):
        config = Settings(_env_file=None)

        assert config.PROCESSING_DELAY_SECONDS == 2.0
        assert config.ETA_MIN_MINUTES == 5
        assert config.ETA_MAX_MINUTES == 20
        assert config.ETA_TICK_SECONDS == 60.0
        assert config.TRIAGE_CONFIDENCE_MODE == "random"

    def test_environment_override(self):
        with patch.dict("os.environ", {"ETA_MAX_MINUTES": "30", "triage_confidence_mode": "keyword"}):
            config = Settings(_env_file=None)

        assert config.ETA_MAX_MINUTES == 30
        assert config.TRIAGE_CONFIDENCE_MODE == "keyword"

    def test_validate_settings(self):
        assert validate_settings(Settings(_env_file=None)) is True
        assert validate_settings(Settings(ETA_MIN_MINUTES=25, _env_file=None)) is False
        assert validate_settings(Settings(DEFAULT_LOCALE="fr", _env_file=None)) is False

    def test_inverted_eta_range_is_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_evaluators(Settings(ETA_MIN_MINUTES=25, _env_file=None))

        assert exc_info.value.details["component"] == "dispatch"

    def test_confidence_mode_selects_scorer(self):
        keyword = build_evaluators(Settings(TRIAGE_CONFIDENCE_MODE="keyword", _env_file=None))
        random_mode = build_evaluators(Settings(_env_file=None))

        assert isinstance(keyword[WorkflowKind.TRIAGE].scorer, KeywordConfidenceScorer)
        assert isinstance(random_mode[WorkflowKind.TRIAGE].scorer, RandomConfidenceScorer)

    def test_engine_from_settings(self):
        config = Settings(PROCESSING_DELAY_SECONDS=0.5, ETA_TICK_SECONDS=1.0, _env_file=None)

        engine = create_workflow_engine(config)

        assert engine.processing_delay == 0.5
        assert engine.eta_tick_seconds == 1.0
        assert engine.evaluators[WorkflowKind.DISPATCH].eta_max_minutes == 20


class TestLogging:

    @pytest.fixture
    def root_logger(self):
        root = logging.getLogger()
        level = root.level
        handlers = list(root.handlers)
        yield root
        for handler in root.handlers[:]:
            if handler not in handlers:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)

    def file_handlers(self, root, log_dir):
        target = os.path.abspath(log_dir / "medintake.log")
        return [
            h for h in root.handlers
            if isinstance(h, RotatingFileHandler) and h.baseFilename == target
        ]

    def test_setup_logging_adds_rotating_file(self, tmp_path, root_logger):
        root = setup_logging(Settings(LOG_DIR=str(tmp_path), LOG_LEVEL="DEBUG", _env_file=None))

        handlers = self.file_handlers(root, tmp_path)
        assert len(handlers) == 1
        assert handlers[0].maxBytes == 5 * 1024 * 1024
        assert root.level == logging.DEBUG
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_setup_logging_twice_attaches_once(self, tmp_path, root_logger):
        config = Settings(LOG_DIR=str(tmp_path), _env_file=None)

        setup_logging(config)
        root = setup_logging(config)

        assert len(self.file_handlers(root, tmp_path)) == 1
        assert root.level == logging.INFO

    def test_log_settings_read_from_environment(self, tmp_path, root_logger):
        with patch.dict("os.environ", {"LOG_DIR": str(tmp_path / "env"), "LOG_LEVEL": "WARNING"}):
            config = Settings(_env_file=None)

        root = setup_logging(config)

        assert config.LOG_LEVEL == "WARNING"
        assert len(self.file_handlers(root, tmp_path / "env")) == 1
        assert root.level == logging.WARNING

    def test_unknown_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(LOG_LEVEL="LOUD", _env_file=None)
