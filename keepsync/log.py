"""
Log initialization for keepsync.  Adds the 'TRACE' level, used while unit testing,
and the 'SUCCESS' and 'TIP' levels the console reports with.
"""

import logging
logger = logging.getLogger(__package__)

if isinstance(logging.getLevelName('TRACE'), str):
    logging.addLevelName(5, 'TRACE')
if isinstance(logging.getLevelName('SUCCESS'), str):
    logging.addLevelName(25, 'SUCCESS')
if isinstance(logging.getLevelName('TIP'), str):
    logging.addLevelName(35, 'TIP')

# ses docs, this actually gets a number, because reasons
TRACE = logging.getLevelName('TRACE')
SUCCESS = logging.getLevelName('SUCCESS')
TIP = logging.getLevelName('TIP')

# console level names -> logging levels
LEVELS = {
    "info": logging.INFO,
    "success": SUCCESS,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "tip": TIP,
}

# don't log tokens
logging.getLogger("requests_oauthlib").setLevel(logging.INFO)
logging.getLogger("urllib3").setLevel(logging.INFO)
