"""
Prompts for the conversational assistant.

The model only ever sees technical identifiers (tool names, field names,
enum tokens). Wording shown to users is produced in code.
"""
import datetime
import json
from typing import Optional

from apps.assistant.state import InvocationState, PendingInvocation


def get_system_instructions(
    pending: Optional[PendingInvocation] = None,
    today: Optional[datetime.date] = None,
) -> str:
    """
    Build the system prompt for one turn.

    Args:
        pending: The session's pending invocation, if any, in technical form
        today: Reference date for relative phrases ("tomorrow")

    Returns:
        Complete system prompt
    """
    today = today or datetime.date.today()

    pending_section = ""
    if pending is not None:
        status = (
            "waiting for the user to confirm"
            if pending.state == InvocationState.AWAITING_CONFIRMATION
            else "still collecting details"
        )
        pending_section = f"""
<pending_action>
tool: {pending.tool_name}
status: {status}
arguments: {json.dumps(pending.arguments, sort_keys=True)}
missing: {json.dumps(pending.missing)}
</pending_action>

If the user is supplying or changing details for the pending action, call the
same tool again with ONLY the fields they mentioned. Do not start a different
action while one is pending.
"""

    return f"""<instructions>
You are AIM Assist, the assistant inside a care management platform for home
care and supported living providers. You help care teams with schedules,
client profiles, cover, staff messages, onboarding, care plans, alerts, leave
and payroll.

Today is {today:%A} {today.isoformat()}.

RESPONSE STYLE:
- Be clear and brief (one or two lines unless more detail is required)
- Use markdown; dashes for lists; **bold** for emphasis
- Never name a tool, function, field or internal code in your reply

TOOLS:
- When the user asks for something a tool can do, call the tool straight
  away with every argument you can take from the conversation
- Leave out arguments the user has not given; never invent placeholders
- Use names exactly as the user wrote them
- Enum arguments take one of the listed tokens
- Dates are YYYY-MM-DD and times are 24-hour HH:MM; convert natural phrases
  ("9am", "half past 3", "next Friday") yourself
- Do not ask for confirmation yourself; the platform does that
- If nothing fits the request, say politely what you can help with instead
</instructions>
{pending_section}"""
