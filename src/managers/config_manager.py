"""
Config Manager

Main configuration manager with include system support.
Loads modular YAML files: the board catalogue and runtime settings.
"""

import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from models.domain.board import BoardSpec
from models.enums import LogLevel
from models.errors import NotFoundError, ValidationError
from utils.enum_helper import EnumHelper
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)

SRC_DIR = Path(__file__).parent.parent


@dataclass(frozen=True)
class RuntimeSettings:
    """Typed view of the runtime section"""
    default_board: str
    history_enabled: bool = True
    event_log_enabled: bool = True
    auto_refresh_enabled: bool = False
    auto_refresh_interval_ms: int = 2000
    log_level: LogLevel = LogLevel.INFO
    log_use_colors: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = 8000


class ConfigManager:
    """
    Main configuration manager with include system support

    Loads config.yaml and processes the include: directive to merge modular
    YAML files. Falls back to factory defaults when anything goes wrong.

    Example:
        config = ConfigManager()
        config.load()

        board = config.get_board("Raspberry Pi 4 Model B")
        settings = config.settings
    """

    def __init__(
        self,
        config_path="config/config.yaml",
        defaults_path="config/factory_defaults.yaml",
        base_dir: Optional[Path] = None,
    ):
        """
        Args:
            config_path: Path to main config.yaml (relative to base_dir)
            defaults_path: Path to factory defaults fallback
            base_dir: Directory the paths are resolved against (src/ by default)
        """
        self.base_dir = Path(base_dir) if base_dir else SRC_DIR
        self.config_path = Path(config_path)
        self.factory_defaults_path = Path(defaults_path)
        self.data: Dict = {}
        self.boards: Dict[str, BoardSpec] = {}
        self.settings: RuntimeSettings

    def load(self) -> Dict:
        """
        Load YAML configuration with include system support

        Process:
        1. Load main config.yaml
        2. If it has 'include:' list, load and merge those files
        3. Otherwise treat it as a monolithic config
        4. Fall back to factory_defaults.yaml on failure
        5. Parse boards and runtime settings
        """
        full_path = self.base_dir / self.config_path
        try:
            with open(full_path, "r", encoding="utf-8") as f:
                main_config = yaml.safe_load(f) or {}

            if 'include' in main_config:
                log.info("Using include-based configuration")
                self.data = self._load_with_includes(main_config['include'], full_path.parent)
            else:
                log.info("Using monolithic configuration")
                self.data = main_config

            self._parse()

        except Exception as ex:
            log.error("Failed to load config.yaml", error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")

            with open(self.base_dir / self.factory_defaults_path, "r", encoding="utf-8") as f:
                self.data = yaml.safe_load(f) or {}
            self._parse()

        return self.data

    def _load_with_includes(self, include_list: List[str], config_dir: Path) -> Dict:
        """Load and merge the included YAML files in order"""
        merged = {}

        for filename in include_list:
            filepath = config_dir / filename
            try:
                with open(filepath, 'r', encoding='utf-8') as f:
                    file_data = yaml.safe_load(f)
                    if file_data:
                        merged.update(file_data)
                        log.info(f"Loaded {filename}", keys=str(list(file_data.keys())))
            except FileNotFoundError:
                log.error(f"File not found: {filename}")
                raise

        log.info("Config merge complete", total_keys=len(merged))
        return merged

    def _parse(self) -> None:
        self.boards = self._parse_boards(self.data.get("boards") or {})
        self.settings = self._parse_settings(self.data.get("runtime") or {})
        if self.settings.default_board not in self.boards:
            raise ValidationError(
                f"Default board '{self.settings.default_board}' is not in the board catalogue"
            )

    @staticmethod
    def _parse_boards(raw: Dict) -> Dict[str, BoardSpec]:
        if not raw:
            raise ValidationError("No boards defined in config")

        boards = {}
        for model, gpios in raw.items():
            if not gpios:
                log.warn(f"Board {model} has no GPIOs, skipping")
                continue
            boards[model] = BoardSpec(model=model, valid_gpios=tuple(int(g) for g in gpios))
        log.info(f"Loaded {len(boards)} board definitions")
        return boards

    def _parse_settings(self, raw: Dict) -> RuntimeSettings:
        history = raw.get("history") or {}
        event_log = raw.get("event_log") or {}
        auto_refresh = raw.get("auto_refresh") or {}
        logging_cfg = raw.get("logging") or {}
        api = raw.get("api") or {}

        return RuntimeSettings(
            default_board=raw.get("default_board") or next(iter(self.boards)),
            history_enabled=bool(history.get("enabled", True)),
            event_log_enabled=bool(event_log.get("enabled", True)),
            auto_refresh_enabled=bool(auto_refresh.get("enabled", False)),
            auto_refresh_interval_ms=int(auto_refresh.get("interval_ms", 2000)),
            log_level=EnumHelper.to_enum(LogLevel, logging_cfg.get("level", "INFO")),
            log_use_colors=bool(logging_cfg.get("use_colors", True)),
            api_host=str(api.get("host", "0.0.0.0")),
            api_port=int(api.get("port", 8000)),
        )

    # ===== Board Access API =====

    def list_boards(self) -> List[BoardSpec]:
        return list(self.boards.values())

    def get_board(self, model: Optional[str] = None) -> BoardSpec:
        """Board by model name (the default board when None)"""
        model = model or self.settings.default_board
        board = self.boards.get(model)
        if board is None:
            raise NotFoundError("Board", model)
        return board
