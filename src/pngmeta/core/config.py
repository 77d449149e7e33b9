"""
Metadata tool configuration.

Stored as JSON; unknown keys are ignored so older config files keep
loading after options are added or removed.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional, Union

from ..formats.png.itxt import XMP_KEYWORD

logger = logging.getLogger(__name__)


@dataclass
class MetadataConfig:
    """Options shared by the metadata operations and the CLI."""
    keyword: str = XMP_KEYWORD
    create_backup: bool = True
    verify_crc: bool = False
    stop_at_idat: bool = True
    verify_with_pillow: bool = True

    @classmethod
    def load(cls, config_file: Optional[Union[str, Path]]) -> 'MetadataConfig':
        """Load configuration from JSON. Missing file gives defaults."""
        config = cls()
        if not config_file or not Path(config_file).exists():
            if config_file:
                logger.warning(f"Config file not found, using defaults: {config_file}")
            return config

        with open(config_file, 'r', encoding='utf-8') as f:
            data = json.load(f)

        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key in known:
                setattr(config, key, value)
            else:
                logger.debug(f"Ignoring unknown config key: {key}")
        return config

    def save(self, config_file: Union[str, Path]):
        """Save configuration to JSON."""
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(asdict(self), f, indent=2)
