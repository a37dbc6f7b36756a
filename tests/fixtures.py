"""
Test Fixtures

Shared test data for the AI-Mod test suite: default model identifiers and
sample texts sized around the validation and summarization thresholds.
"""

SENTIMENT_MODEL = "@cf/huggingface/distilbert-sst-2-int8"
CLASSIFICATION_MODEL = "@cf/meta/llama-2-7b-chat-int8"
SUMMARIZATION_MODEL = "@cf/facebook/bart-large-cnn"

SHORT_TEXT = "Great article, thanks for sharing it with the community!"

SPAM_TEXT = "CONGRATULATIONS!!! You won a free cruise. Click the link to claim your prize."

LONG_TEXT = (
    "The city council met on Tuesday evening to discuss the proposed changes to the "
    "downtown parking regulations. Residents raised concerns about the cost of permits "
    "and the reduced number of spaces available near the central market. Several "
    "business owners argued that the new rules would discourage visitors from shopping "
    "in the area, while others welcomed the plan to convert part of the main street into "
    "a pedestrian zone. After a long debate, the council agreed to postpone the vote until "
    "a traffic study has been completed and a public consultation has taken place."
)
