from .env import Env as Env
from .load_env import load_env as load_env
from .proxy_config import ProxyConfig as ProxyConfig
from .time_parser import TimeParser as TimeParser
