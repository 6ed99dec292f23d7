from abc import abstractmethod

from httpx._types import QueryParamTypes

from shared.clients.ClientInterface import ClientInterface
from shared.clients.project.models.FileInfo import FileInfo
from shared.errors import ProjectLookupError, SuggestionPipelineError
from shared.helper.HelperConfig import HelperConfig


class ProjectClientInterface(ClientInterface):
    """Read access to the product's project and file metadata.

    Backs three external lookups: project membership, project goal and
    file metadata by ids.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "project"

    def _get_error_class(self) -> type[SuggestionPipelineError]:
        return ProjectLookupError

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_projects(self) -> str:
        """Returns the endpoint path for project lookups (e.g. "/rest/v1/projects")."""
        pass

    @abstractmethod
    def _get_endpoint_files(self) -> str:
        """Returns the endpoint path for file lookups (e.g. "/rest/v1/files")."""
        pass

    ################ PARAMS BUILDER ##################
    @abstractmethod
    def get_membership_params(self, user_id: str, project_id: str) -> QueryParamTypes:
        """Query params selecting the project only if user_id is a member of it."""
        pass

    @abstractmethod
    def get_goal_params(self, project_id: str) -> QueryParamTypes:
        """Query params selecting the goal of a project."""
        pass

    @abstractmethod
    def get_files_params(self, file_ids: list[str]) -> QueryParamTypes:
        """Query params selecting id, name and type of all given files in one request."""
        pass

    ##########################################
    ############### RESPONSE PARSER ##########
    ##########################################

    @abstractmethod
    def extract_rows(self, raw_response: dict | list) -> list[dict]:
        """Normalise a raw list response into a list of row dicts.

        Raises:
            ProjectLookupError: If the response is not a row list.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def _fetch_rows(self, endpoint: str, params: QueryParamTypes) -> list[dict]:
        response = await self.do_request(method="GET", endpoint=endpoint, params=params, raise_on_error=True)
        try:
            raw_response = response.json()
        except ValueError as e:
            raise ProjectLookupError(f"Response from {endpoint} is not valid JSON.") from e
        return self.extract_rows(raw_response)

    async def do_check_membership(self, user_id: str, project_id: str) -> bool:
        """Check whether user_id has read access to project_id.

        Raises:
            ProjectLookupError: If the store cannot be queried.
        """
        rows = await self._fetch_rows(self._get_endpoint_projects(), self.get_membership_params(user_id, project_id))
        return len(rows) > 0

    async def do_fetch_project_goal(self, project_id: str) -> str | None:
        """Fetch the goal of a project. None if the project has no goal set.

        Raises:
            ProjectLookupError: If the store cannot be queried or the project does not exist.
        """
        rows = await self._fetch_rows(self._get_endpoint_projects(), self.get_goal_params(project_id))
        if not rows:
            raise ProjectLookupError(f"Project {project_id} not found.")
        goal = rows[0].get("goal")
        return goal if isinstance(goal, str) else None

    async def do_fetch_files_by_ids(self, file_ids: list[str]) -> list[FileInfo]:
        """Fetch metadata of all given files with a single request.

        Unknown ids are simply absent from the result.

        Raises:
            ProjectLookupError: If the store cannot be queried.
        """
        if not file_ids:
            return []
        rows = await self._fetch_rows(self._get_endpoint_files(), self.get_files_params(file_ids))
        files: list[FileInfo] = []
        for row in rows:
            try:
                files.append(FileInfo.model_validate({**row, "id": str(row.get("id"))}))
            except ValueError:
                self.logging.warning("Skipping malformed file row: %s", row)
        return files
