from .apiserver import *
from .fake_api import *
from .fake_console import *
from .mock_provider import *
from .util import *
