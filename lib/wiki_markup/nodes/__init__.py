from .enums import *
from .hooks import *
from .initializers import *
from .links import *
from .params import *
from .templates import *
