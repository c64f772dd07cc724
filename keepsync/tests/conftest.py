import os

import keepsync

from .fixtures import *  # pylint: disable=unused-import, unused-wildcard-import, wildcard-import

# the fake apis are plain http
os.environ['OAUTHLIB_INSECURE_TRANSPORT'] = '1'

keepsync.logger.setLevel("TRACE")
