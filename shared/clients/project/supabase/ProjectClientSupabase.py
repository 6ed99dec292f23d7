from httpx._types import QueryParamTypes

from shared.clients.project.ProjectClientInterface import ProjectClientInterface
from shared.errors import ProjectLookupError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class ProjectClientSupabase(ProjectClientInterface):
    """PostgREST access to the projects(id, user_id, goal) and files(id, name, type) tables."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Supabase"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
        ]

    ################ AUTH ##################
    async def _get_auth_header(self) -> dict:
        return {"apikey": self._api_key, "Authorization": f"Bearer {self._api_key}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/rest/v1/"

    def _get_endpoint_projects(self) -> str:
        return "/rest/v1/projects"

    def _get_endpoint_files(self) -> str:
        return "/rest/v1/files"

    ################ PARAMS BUILDER ##################
    def get_membership_params(self, user_id: str, project_id: str) -> QueryParamTypes:
        return {"select": "id", "id": f"eq.{project_id}", "user_id": f"eq.{user_id}", "limit": "1"}

    def get_goal_params(self, project_id: str) -> QueryParamTypes:
        return {"select": "goal", "id": f"eq.{project_id}", "limit": "1"}

    def get_files_params(self, file_ids: list[str]) -> QueryParamTypes:
        # quoted so that ids containing reserved characters survive PostgREST list parsing
        quoted = ",".join(f'"{file_id}"' for file_id in file_ids)
        return {"select": "id,name,type", "id": f"in.({quoted})"}

    ##########################################
    ############### RESPONSE PARSER ##########
    ##########################################

    def extract_rows(self, raw_response: dict | list) -> list[dict]:
        if not isinstance(raw_response, list):
            raise ProjectLookupError("PostgREST did not return a row list.")
        return [row for row in raw_response if isinstance(row, dict)]
