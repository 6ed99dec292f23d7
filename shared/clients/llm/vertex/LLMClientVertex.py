from shared.clients.auth.TokenProvider import TokenProvider
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.errors import GenerationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class LLMClientVertex(LLMClientInterface):
    def __init__(self, helper_config: HelperConfig, token_provider: TokenProvider):
        super().__init__(helper_config=helper_config)
        self._token_provider = token_provider
        self._location = self.get_config_val("LOCATION", default="global", val_type="string")
        self._project_id = self.get_config_val("PROJECT_ID", default="", val_type="string")
        self._base_url = self.get_config_val("BASE_URL", default="", val_type="string")
        self.top_p = float(self.get_config_val("TOP_P", default=0.95, val_type="number"))
        self.top_k = int(self.get_config_val("TOP_K", default=40, val_type="number"))

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Vertex"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="LOCATION", val_type="string", default="global"),
            EnvConfig(env_key="PROJECT_ID", val_type="string", default=""),
            EnvConfig(env_key="BASE_URL", val_type="string", default=""),
            EnvConfig(env_key="TOP_P", val_type="number", default=0.95),
            EnvConfig(env_key="TOP_K", val_type="number", default=40),
        ]

    ################ AUTH ##################
    async def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {await self._token_provider.get_token()}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        if self._base_url:
            return self._base_url
        # the global location has no regional host prefix
        if self._location == "global":
            return "https://aiplatform.googleapis.com"
        return f"https://{self._location}-aiplatform.googleapis.com"

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    def _get_endpoint_generate(self) -> str:
        project_id = self._project_id or self._token_provider.get_project_id()
        if not project_id:
            raise GenerationError("No GCP project id configured (LLM_VERTEX_PROJECT_ID or credentials project_id).")
        return (
            f"/v1/projects/{project_id}/locations/{self._location}"
            f"/publishers/google/models/{self.chat_model}:generateContent"
        )

    ################ PAYLOAD BUILDER ##################
    def get_generate_payload(self, prompt: str, system_instruction: str | None = None, json_output: bool = True) -> dict:
        """Build the Vertex AI generateContent body.

        Returns:
            dict: {"contents": [...], "generationConfig": {...}, "systemInstruction": {...}}
        """
        generation_config: dict = {
            "temperature": self.temperature,
            "topP": self.top_p,
            "topK": self.top_k,
            "maxOutputTokens": self.max_output_tokens,
        }
        if json_output:
            generation_config["responseMimeType"] = "application/json"

        payload: dict = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        return payload

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_generated_text(self, response_data: dict) -> str:
        candidates = response_data.get("candidates") or []
        parts = []
        if candidates and isinstance(candidates[0], dict):
            parts = (candidates[0].get("content") or {}).get("parts") or []
        text = parts[0].get("text") if parts and isinstance(parts[0], dict) else None
        if not text:
            finish_reason = candidates[0].get("finishReason") if candidates and isinstance(candidates[0], dict) else None
            raise GenerationError(f"No content returned from Vertex (finishReason={finish_reason}).")
        return text
