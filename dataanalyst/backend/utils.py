from typing import Dict, List, Optional


def opt_messages_to_list(
    system_message: Optional[str],
    user_message: Optional[str],
    convert_system_to_user: bool = False,
) -> List[Dict[str, str]]:
    messages = []
    if system_message:
        role = "user" if convert_system_to_user else "system"
        messages.append({"role": role, "content": system_message})
    if user_message:
        messages.append({"role": "user", "content": user_message})
    return messages
