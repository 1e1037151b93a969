"""PortProbe Utils"""
from utils.logger     import get_logger, set_verbosity, log
from utils.validators import validate_port, validate_positive, sanitize_banner
from utils.constants  import PortState, TOP_PORTS, WELL_KNOWN_SERVICES
__all__ = ["get_logger", "set_verbosity", "log", "validate_port",
           "validate_positive", "sanitize_banner", "PortState", "TOP_PORTS",
           "WELL_KNOWN_SERVICES"]
