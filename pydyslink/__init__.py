from .client import DysonClient
from .models import Config, EnvironmentState, FanState, ProductState
