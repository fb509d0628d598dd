"""
Configuration loader for the order converter
"""
import json
from pathlib import Path
from typing import Dict, Any, Optional


class ConfigLoader:
    """Load and manage configuration settings"""
    
    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config loader
        
        Args:
            config_path: Path to config.json file
        """
        if config_path is None:
            config_path = Path(__file__).parent / "config.json"
        
        self.config_path = Path(config_path)
        self.config: Dict[str, Any] = {}
        self.load_config()
    
    def load_config(self) -> None:
        """Load configuration from JSON file, layered over the defaults"""
        self.config = self._get_default_config()
        if self.config_path.exists():
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._merge(self.config, json.load(f))
    
    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation
        
        Args:
            key_path: Dot-separated path (e.g., 'limits.max_order_qty')
            default: Default value if key not found
            
        Returns:
            Configuration value
        """
        keys = key_path.split('.')
        value = self.config
        
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        
        return value
    
    def set(self, key_path: str, value: Any) -> None:
        """
        Set configuration value using dot notation
        
        Args:
            key_path: Dot-separated path
            value: Value to set
        """
        keys = key_path.split('.')
        config = self.config
        
        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]
        
        config[keys[-1]] = value
    
    @classmethod
    def _merge(cls, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                cls._merge(base[key], value)
            else:
                base[key] = value
    
    @staticmethod
    def _get_default_config() -> Dict[str, Any]:
        """Get default configuration"""
        return {
            "limits": {
                # One authoritative bound per deployment
                "max_order_qty": 10000,
                "max_pack": 1000
            },
            "pdf": {
                "row_y_tolerance": 6
            },
            "scan": {
                "header_rows": 50,
                "customer_lines": 40
            },
            "paths": {
                "input_folder": "attachments",
                "output_folder": "Output",
                "log_file": "Output/ProcessingLog.json"
            }
        }
