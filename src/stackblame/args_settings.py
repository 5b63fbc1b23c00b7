import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import jsonschema
import platformdirs

from stackblame._logging import set_logging_level_from_verbosity
from stackblame.constants import (
    DEFAULT_HIGHLIGHT_COLOR,
    DEFAULT_REVISION,
    DEFAULT_VERBOSITY,
)
from stackblame.keys import KeysArgs
from stackblame.typedefs import FileStr
from stackblame.utils import log

logger = logging.getLogger(__name__)


@dataclass
class Args:
    repository: str = ""
    revision: str = DEFAULT_REVISION
    commit_url: str = ""
    file_url: str = ""
    blame_url: str = ""
    custom_message: str = ""
    full_path: bool = False
    highlight_color: str = DEFAULT_HIGHLIGHT_COLOR
    multithread: bool = True
    verbosity: int = DEFAULT_VERBOSITY

    def __post_init__(self):
        fld_names_args = {fld.name for fld in fields(Args)}
        fld_names_keys = {fld.name for fld in fields(KeysArgs)}
        assert fld_names_args == fld_names_keys, (
            f"Args - KeysArgs: {fld_names_args - fld_names_keys}\n"
            f"KeysArgs - Args: {fld_names_keys - fld_names_args}"
        )


@dataclass
class Settings(Args):
    # Do not use a constant variable for default settings, because it is a mutable
    # object. For each new settings, a new object should be created.

    def create_settings_file(self, settings_path: Path):
        settings_dict = asdict(self)
        with open(settings_path, "w", encoding="utf-8") as f:
            d = json.dumps(settings_dict, indent=4, sort_keys=True)
            f.write(d)

    def save(self):
        settings_dict = asdict(self)
        jsonschema.validate(settings_dict, SettingsFile.SETTINGS_SCHEMA)
        settings_path = SettingsFile.get_location()
        self.create_settings_file(settings_path)

    def save_as(self, pathlike: FileStr | Path):
        settings_file_path = Path(pathlike)
        settings_dict = asdict(self)
        jsonschema.validate(settings_dict, SettingsFile.SETTINGS_SCHEMA)
        self.create_settings_file(settings_file_path)
        SettingsFile.set_location(settings_file_path)

    def to_cli_args(self) -> "CLIArgs":
        args = CLIArgs()
        vars_args = vars(args)
        settings_dict = asdict(self)
        for key in settings_dict:
            if key in vars_args:
                setattr(args, key, settings_dict[key])
        return args

    def log(self):
        settings_dict = asdict(self)
        for key, value in settings_dict.items():
            key = key.replace("_", "-")
            log(f"{key:16}: {value}")


@dataclass
class CLIArgs(Args):
    input_fstr: str = ""
    show: bool = False
    save: bool = False
    save_as: str | None = None
    load: str | None = None
    reset: bool = False

    def create_settings(self) -> Settings:
        settings = Settings()
        args_dict = asdict(self)
        for fld in fields(Args):
            setattr(settings, fld.name, args_dict[fld.name])
        logger.info(f"Settings from CLIArgs: {settings}")
        return settings

    def create_args(self) -> Args:
        args = Args()
        cli_args_dict = asdict(self)
        for fld in fields(Args):
            if fld.name in cli_args_dict:
                setattr(args, fld.name, cli_args_dict[fld.name])
        return args

    # Options that are not given on the command line are None in the namespace and
    # keep the value from the settings file.
    def update_with_namespace(self, namespace: Namespace):
        nmsp_dict: dict = vars(namespace)
        for key in nmsp_dict:
            assert key in vars(self), f"Namespace var {key} not in CLIArgs"
            if nmsp_dict[key] is not None:
                setattr(self, key, nmsp_dict[key])
        set_logging_level_from_verbosity(self.verbosity)


class SettingsFile:
    SETTINGS_FILE_NAME = "stackblame.json"
    SETTINGS_LOCATION_FILE_NAME: str = "stackblame-location.json"

    SETTINGS_DIR = platformdirs.user_config_dir("stackblame", ensure_exists=True)
    SETTINGS_LOCATION_PATH = Path(SETTINGS_DIR) / SETTINGS_LOCATION_FILE_NAME
    INITIAL_SETTINGS_PATH = Path(SETTINGS_DIR) / SETTINGS_FILE_NAME

    SETTINGS_LOCATION_SCHEMA: dict = {
        "type": "object",
        "properties": {
            "settings_location": {"type": "string"},
        },
        "additionalProperties": False,
        "minProperties": 1,
    }

    SETTINGS_SCHEMA: dict[str, Any] = {
        "type": "object",
        "properties": {
            "repository": {"type": "string"},
            "revision": {"type": "string"},
            "commit_url": {"type": "string"},
            "file_url": {"type": "string"},
            "blame_url": {"type": "string"},
            "custom_message": {"type": "string"},
            "full_path": {"type": "boolean"},
            "highlight_color": {"type": "string"},
            "multithread": {"type": "boolean"},
            "verbosity": {"type": "integer", "minimum": 0, "maximum": 2},
        },
        "additionalProperties": False,
        "minProperties": 10,
    }

    @classmethod
    def default_location_settings(cls) -> dict[str, str]:
        return {"settings_location": cls.INITIAL_SETTINGS_PATH.as_posix()}

    # Create file that contains the location of the settings file and return this
    # settings file location.
    @classmethod
    def create_location_file_for(cls, location_settings: dict[str, str]) -> Path:
        jsonschema.validate(location_settings, cls.SETTINGS_LOCATION_SCHEMA)
        d = json.dumps(location_settings, indent=4)
        with open(cls.SETTINGS_LOCATION_PATH, "w", encoding="utf-8") as f:
            f.write(d)
        return Path(location_settings["settings_location"])

    @classmethod
    def get_location(cls) -> Path:
        try:
            with open(cls.SETTINGS_LOCATION_PATH, "r", encoding="utf-8") as f:
                s = f.read()
            settings_location_dict = json.loads(s)
            jsonschema.validate(settings_location_dict, cls.SETTINGS_LOCATION_SCHEMA)
            return Path(settings_location_dict["settings_location"])
        except (
            FileNotFoundError,
            json.decoder.JSONDecodeError,
            jsonschema.ValidationError,
        ):
            return cls.create_location_file_for(cls.default_location_settings())

    @classmethod
    def show(cls):
        path = cls.get_location()
        log(f"Settings file location: {path}")
        settings, _ = cls.load()
        settings.log()

    @classmethod
    def load(cls) -> tuple[Settings, str]:
        return cls.load_from(cls.get_location())

    @classmethod
    def load_from(cls, file: FileStr | Path) -> tuple[Settings, str]:
        try:
            path = Path(file)
            if path.suffix != ".json":
                raise ValueError(f"File {str(path)} does not have a .json extension")
            with open(path, "r", encoding="utf-8") as f:
                s = f.read()
            settings_dict = json.loads(s)
            jsonschema.validate(settings_dict, cls.SETTINGS_SCHEMA)
            return Settings(**settings_dict), ""
        except (
            ValueError,
            FileNotFoundError,
            json.decoder.JSONDecodeError,
            jsonschema.ValidationError,
        ) as e:
            return Settings(), str(e)

    @classmethod
    def reset(cls) -> Settings:
        cls.create_location_file_for(cls.default_location_settings())
        settings = Settings()
        settings.save()
        return settings

    @classmethod
    def set_location(cls, location: FileStr | Path):
        # Creating a new file or overwriting the existing file is both done using the
        # same "with open( ..., "w") as f" statement.
        cls.create_location_file_for({"settings_location": str(location)})
