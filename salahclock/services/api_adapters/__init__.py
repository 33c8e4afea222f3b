import logging

logger = logging.getLogger(__name__)


def get_selected_api_adapter(config):
    """
    Instantiates and returns the API adapter based on configuration.
    """
    adapter_name = config.get('PRAYER_API_ADAPTER', "AlAdhanAdapter")
    base_url = config.get('PRAYER_API_BASE_URL')
    timeout = config.get('PRAYER_API_TIMEOUT', 10)

    if adapter_name == "AlAdhanAdapter":
        if not base_url:
            logger.error("AlAdhan API base URL is not configured.")
            return None
        from .aladhan_adapter import AlAdhanAdapter
        return AlAdhanAdapter(base_url=base_url, timeout=timeout)
    else:
        logger.error(f"Unsupported Prayer API Adapter: {adapter_name}")
        return None
