"""
Configuration Service
Centralized configuration management with caching and validation
"""

import json
import os
from functools import lru_cache
from typing import Dict, List, Any, Optional
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class ConfigurationService:
    """
    Centralized service for loading and caching storefront configurations

    Loads configurations from JSON files in the config directory with:
    - LRU caching for performance
    - Typed accessors for wizard, mock and fallback data
    - Error handling
    - Hot-reload capability
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize ConfigurationService

        Args:
            config_dir: Path to configuration directory. If None, uses default storefront/config
        """
        if config_dir is None:
            self.config_dir = Path(__file__).parent.parent.parent / "config"
        else:
            self.config_dir = Path(config_dir)

        logger.info(f"ConfigurationService initialized with config_dir: {self.config_dir}")

    @lru_cache(maxsize=32)
    def load_config(self, config_name: str) -> Dict[str, Any]:
        """
        Load configuration from JSON file with caching

        Args:
            config_name: Name of config file (without .json extension)

        Returns:
            Dict containing configuration data

        Raises:
            FileNotFoundError: If config file not found
            json.JSONDecodeError: If config file is invalid JSON
        """
        try:
            config_path = self.config_dir / f"{config_name}.json"

            if not config_path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")

            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)

            logger.info(f"Loaded config: {config_name} (version: {config.get('version', 'N/A')})")
            return config

        except FileNotFoundError:
            logger.error(f"Config file not found: {config_name}.json")
            raise
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {config_name}.json: {e}")
            raise

    def reload_config(self, config_name: str) -> Dict[str, Any]:
        """
        Force reload of configuration (clears cache)

        Args:
            config_name: Name of config file to reload

        Returns:
            Freshly loaded configuration
        """
        self.load_config.cache_clear()
        logger.info(f"Cache cleared, reloading config: {config_name}")
        return self.load_config(config_name)

    # ------------------------------------------------------------------
    # Wizard
    # ------------------------------------------------------------------

    def get_wizard_config(self) -> Dict[str, Any]:
        """Get negotiation wizard configuration"""
        return self.load_config("wizard_config")

    def get_wizard_steps(self) -> List[Dict[str, Any]]:
        """Get ordered wizard step descriptors"""
        return self.get_wizard_config().get("steps", [])

    def get_wizard_transitions(self) -> Dict[int, List[int]]:
        """
        Get allowed wizard step transitions

        Returns:
            Dict mapping a step id to the step ids reachable from it
            (JSON object keys are converted back to int)
        """
        transitions = self.get_wizard_config().get("transitions", {})
        return {int(step): [int(target) for target in targets] for step, targets in transitions.items()}

    def get_progress_stages(self) -> List[Dict[str, Any]]:
        """Get the fixed negotiation progress stages"""
        return self.get_wizard_config().get("progress", {}).get("stages", [])

    def get_progress_interval(self) -> float:
        """Seconds between two progress stages"""
        return float(self.get_wizard_config().get("progress", {}).get("stage_interval_seconds", 4))

    def get_estimated_time_remaining(self) -> str:
        """Human readable estimate shown while the negotiation runs"""
        return self.get_wizard_config().get("progress", {}).get("estimated_time_remaining", "2-3 minutes")

    def get_transcription_config(self) -> Dict[str, Any]:
        """Get transcription call policy (path, timeout, retries, backoff)"""
        return self.get_wizard_config().get("transcription", {})

    def get_negotiation_config(self) -> Dict[str, Any]:
        """Get negotiation call policy (path, timeout, mock success rate)"""
        return self.get_wizard_config().get("negotiation", {})

    def get_featured_products_config(self) -> Dict[str, Any]:
        """Get featured products feed policy (path, timeout, cache duration)"""
        return self.get_wizard_config().get("featured_products", {})

    def get_session_ttl(self) -> int:
        """Get session TTL in seconds (SESSION_TTL overrides the configured value)"""
        env_ttl = os.getenv("SESSION_TTL")
        if env_ttl:
            return int(env_ttl)
        return self.get_wizard_config().get("session", {}).get("default_ttl_seconds", 3600)

    def get_wizard_ttl(self) -> int:
        """Get idle lifetime of a negotiation wizard in seconds"""
        return self.get_wizard_config().get("session", {}).get("wizard_ttl_seconds", 3600)

    # ------------------------------------------------------------------
    # Mock and fallback data
    # ------------------------------------------------------------------

    def get_mock_transcriptions(self) -> List[Dict[str, Any]]:
        """Get local transcription responses"""
        return self.load_config("mock_transcriptions").get("responses", [])

    def get_mock_negotiation_results(self) -> Dict[str, List[Dict[str, Any]]]:
        """Get local negotiation outcomes grouped as success/failure"""
        config = self.load_config("mock_negotiation_results")
        return {
            "success": config.get("success", []),
            "failure": config.get("failure", []),
        }

    def get_contract_positions(self) -> List[Dict[str, Any]]:
        """Get contract positions seeded into the review step"""
        return self.load_config("contract_positions").get("positions", [])

    def get_fallback_playbook(self) -> Dict[str, Any]:
        """Get the static playbook attached to text-entered requirements"""
        return self.load_config("fallback_playbook").get("playbook_data", {})

    def get_fallback_products(self) -> List[Dict[str, Any]]:
        """Get products served while the product API is unavailable"""
        return self.load_config("fallback_products").get("products", [])

    def get_product_categories(self) -> List[Dict[str, Any]]:
        """Get the category tree (categories → subcategories → product types and tags)"""
        return self.load_config("product_taxonomy").get("categories", [])

    def get_product_filter_tags(self) -> List[Dict[str, Any]]:
        """Get the selectable filter tags"""
        return self.load_config("product_taxonomy").get("tags", [])

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def get_product_api_base_url(self) -> str:
        """Base URL of the external product API"""
        return os.getenv("PRODUCT_API_BASE_URL", "http://localhost:8000").rstrip("/")

    def get_negotiation_api_base_url(self) -> str:
        """Base URL of the external negotiation/transcription API"""
        return os.getenv("NEGOTIATION_API_BASE_URL", "http://localhost:8000").rstrip("/")

    def get_buyer_id(self) -> int:
        """Buyer id sent to the external services (MVP: a single buyer)"""
        return int(os.getenv("BUYER_ID", "1"))

    def validate_config(self, config_name: str) -> bool:
        """
        Validate configuration file

        Args:
            config_name: Name of config to validate

        Returns:
            True if valid, False otherwise
        """
        try:
            config = self.load_config(config_name)

            if "version" not in config:
                logger.warning(f"Config {config_name} missing version field")

            logger.info(f"Config {config_name} validated successfully")
            return True

        except (FileNotFoundError, json.JSONDecodeError) as e:
            logger.error(f"Config validation failed for {config_name}: {e}")
            return False


# Global singleton instance
_config_service: Optional[ConfigurationService] = None


def get_config_service() -> ConfigurationService:
    """
    Get global ConfigurationService singleton instance

    Returns:
        ConfigurationService instance
    """
    global _config_service
    if _config_service is None:
        _config_service = ConfigurationService()
    return _config_service


def init_config_service(config_dir: Optional[str] = None) -> ConfigurationService:
    """
    Initialize global ConfigurationService with custom config directory

    Args:
        config_dir: Path to configuration directory

    Returns:
        ConfigurationService instance
    """
    global _config_service
    _config_service = ConfigurationService(config_dir)
    logger.info("Global ConfigurationService initialized")
    return _config_service
