"""Prompt templates and {{placeholder}} composition."""

import re

from ..models import State

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")

MESSAGE_HANDLER_TEMPLATE = """# Action Examples
{{action_examples}}
(Action examples are for reference only. Do not use the information from them in your response.)

# Task: Generate dialog and actions for the character {{agent_name}}.

{{actions}}

# Conversation
{{recent_messages}}

# Instructions: Write the next message for {{agent_name}}. Include an action, if appropriate. Possible response actions: {{action_names}}

Response format should be formatted in a JSON block like this:
```json
{ "user": "{{agent_name}}", "text": string, "action": string }
```"""


def compose_context(state: State, template: str) -> str:
    """Fill {{key}} placeholders from the state; unknown keys become empty."""
    values = state.template_values()
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), ""), template)
