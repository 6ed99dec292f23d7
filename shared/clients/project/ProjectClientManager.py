from shared.helper.HelperConfig import HelperConfig
from shared.clients.project.ProjectClientInterface import ProjectClientInterface


class ProjectClientManager:
    """
    Manager class to instantiate the configured project metadata client.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """
        Reads the project metadata engine from ENV configuration.

        Raises:
            ValueError: If PROJECT_ENGINE is not set or empty.
        """
        engine = self.helper_config.get_string_val("PROJECT_ENGINE")
        if not engine:
            raise ValueError("No project engine specified in configuration.")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> ProjectClientInterface:
        """
        Initializes the project client based on the engine specified in the configuration.

        Raises:
            ValueError: If the engine is unsupported or cannot be imported.
        """
        engine = self._get_engine_from_env()
        class_name = f"ProjectClient{engine}"
        try:
            module = __import__(
                f"shared.clients.project.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported project engine specified: '{engine}'. Error: {e}")
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated project client for engine: %s", engine)
        return client

    def get_client(self) -> ProjectClientInterface:
        """
        Returns the instantiated project client.
        """
        return self.client
