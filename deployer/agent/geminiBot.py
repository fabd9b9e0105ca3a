import google.generativeai as genai

from deployer.errors import GenerationError


class GeminiBot:
    """Forwards a free-text prompt to Gemini and returns the reply text."""

    def __init__(self, api_key, model_name="gemini-1.5-flash"):
        self.api_key = api_key
        self.model_name = model_name
        self._model = None

    @property
    def model(self):
        if self._model is None:
            if not self.api_key:
                raise GenerationError("GEMINI_API_KEY is not configured")
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def ask(self, prompt):
        response = self.model.generate_content(prompt)
        return response.text
