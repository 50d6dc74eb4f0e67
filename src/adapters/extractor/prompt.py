import json
from ...domain.errors import ExtractionError
from ...domain.models import ExtractedNotice

PROMPT = (
    "From the attached training announcement image, extract the following and respond as a JSON object: "
    "1. summary: a short summary of what the training covers. "
    "2. applicationPeriod: the period during which applications are accepted. "
    "3. trainingPeriod: the period in which the training itself takes place. "
    "4. target: who the training is for. "
    "Answer in the language of the document. If a field is not present, use an empty string."
)

FIELDS = ("summary", "applicationPeriod", "trainingPeriod", "target")


def parse_notice_json(text: str | None) -> ExtractedNotice:
    if not text:
        raise ExtractionError("model returned no summary data")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"model returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ExtractionError("model returned JSON that is not an object")

    values = {k: ("" if data.get(k) is None else str(data.get(k)).strip()) for k in FIELDS}
    return ExtractedNotice(
        summary=values["summary"],
        application_period=values["applicationPeriod"],
        training_period=values["trainingPeriod"],
        target=values["target"],
    )
