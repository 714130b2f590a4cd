CODEBASE_CONTEXT_HEADER = "## Codebase Context\n"

FILE_BLOCK = "File: {path}\n```\n{content}\n```\n\n"

USER_TASK_HEADER = "## User's Task\n"

SYSTEM_INSTRUCTIONS_HEADER = "## System Instructions: \n"

OUTPUT_SCHEMA_HEADER = "## Output Schema: \n"

# Token counting assembles the prompt slightly differently (no trailing colon).
COUNT_OUTPUT_SCHEMA_HEADER = "## Output Schema\n"
