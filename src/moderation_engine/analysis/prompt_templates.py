"""Prompt template and fixed messages for the contextual assessment."""

CONTEXTUAL_ANALYSIS_SYSTEM = """You are a content moderation analyst. Be brief, objective and specific.
Do not repeat the analyzed text back in full."""

CONTEXTUAL_ANALYSIS_PROMPT = """Analyze the following text for harmful content, specifically identifying:
1. Whether this contains cyberbullying, toxicity, or harmful language
2. The specific type of harmful content (e.g., insults, threats, hate speech)
3. The severity level (mild, moderate, severe)
4. Context analysis - could this be misinterpreted or is it clearly harmful?

Provide a brief, objective assessment focused on content moderation.

Text to analyze:
"{text}\""""

NO_MEANINGFUL_RESPONSE = "No meaningful response from the contextual analysis service."

ANALYSIS_UNAVAILABLE = "Unable to perform contextual analysis at this time."

NOT_CONFIGURED = "Contextual analysis is not configured (no API key provided)."
