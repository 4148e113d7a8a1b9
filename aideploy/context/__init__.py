from aideploy.context.config import AiServiceTier, Config, DeploymentConfig
from aideploy.context.logger import Console, Logger, log_func

__all__ = ["AiServiceTier", "Config", "DeploymentConfig", "Console", "Logger", "log_func"]
