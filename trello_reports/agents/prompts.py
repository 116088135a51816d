"""
Prompt assembly for board reports.

The digest is a deliberate reduction of a board snapshot into Markdown the
model can read within its context budget: board identity, the full member
roster, every list with its cards, and a bounded window of recent activity.
"""

from typing import List

from trello_reports.models.board import Activity, BoardSnapshot, Card

MAX_DIGEST_ACTIVITIES = 20

REPORT_TEMPERATURE = 0.7
CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 1000

REPORT_TOKEN_BUDGETS = {
    "weekly": 2000,
    "monthly": 4000,
}
DEFAULT_REPORT_TOKEN_BUDGET = 3000

CHAT_SYSTEM_PROMPT = (
    "You are a helpful assistant for Trello users. "
    "You provide concise and accurate information."
)

DATA_CONTEXT_PREAMBLE = (
    "You will be provided with a structured summary of Trello board data. This may include "
    "card names, descriptions, current lists (statuses), members, due dates, labels, comments "
    "and recent activity logs. Your analysis must be strictly based on this provided data.\n\n"
)

WEEKLY_PROMPT = """You are an expert AI Project Management Assistant. Analyze the provided Trello board data and write a concise, professional weekly project status report for stakeholders and team members.

Use Markdown and structure the report with these sections:

1. ## Executive Summary
   Two or three sentences on overall progress and any critical alerts for the week.
2. ## Progress This Week
   Tasks completed (moved to 'Done' or a similar final list), tasks that moved forward, newly critical tasks.
3. ## Current Project Status
   In Progress, Blocked/Impeded (name the blocker when the data mentions it), Upcoming in the next 7 days.
4. ## Priorities & Deadlines for Next Week
   Key tasks and milestones due next week, suggested priorities based on due dates and labels.
5. ## Risks, Blockers & Issues
   Critical blockers and any new risks surfaced this week, e.g. from comments.
6. ## Team Focus & Contributions
   Areas of team activity and major completions. Describe task movement and deliverables, not individual performance.
7. ## Data Limitations
   If important information is missing from the data, say so briefly.

Rules:
* Base every statement on the provided data. Do not invent tasks, people, dates or facts.
* Keep a formal, objective tone.
* Be thorough but concise.
"""

MONTHLY_PROMPT = """You are a strategic AI Project Management Analyst. Analyze the provided Trello board data covering the last month and write a comprehensive monthly project report for senior management.

Use Markdown and structure the report with these sections:

1. ## Executive Summary
   The month's performance, key achievements, overall project health and critical concerns.
2. ## Overall Project Health & Status
   A qualitative assessment (On Track, Minor Deviations, At Risk) and the status of major initiatives.
3. ## Major Achievements & Milestones Reached
4. ## Key Performance Indicators & Metrics Overview
   Tasks planned vs. completed, throughput and cycle times where the activity log allows. Say so when a metric cannot be derived.
5. ## Trends and Patterns Observed This Month
   Completion trends, recurring blockers, shifts in workload.
6. ## Resource Overview & Team Contributions
   Workload distribution and collective contributions. Avoid individual performance judgements.
7. ## Significant Risks, Issues & Mitigation
8. ## Recommendations for Upcoming Month
   Three to five actionable recommendations.
9. ## Data Limitations
   Note anything missing from the data that limits the analysis.

Rules:
* Every conclusion must be supported by the provided data. Do not invent facts.
* Focus on insight rather than restating the data.
* Use headings, bullet points and small tables where they help readability.
"""

DEFAULT_PROMPT = """You are a helpful AI Project Management Assistant. Analyze the provided Trello board data and write a clear, informative project report.

Use Markdown and include, where the data supports it:

1. ## Overall Summary
2. ## Progress on Key Tasks & Milestones
3. ## Current Status Snapshot
   What is To Do, In Progress, Blocked or Completed based on the lists.
4. ## Team Activity Summary
5. ## Identified Risks & Issues
6. ## Actionable Insights & Recommendations
7. ## Data Limitations

Base the report strictly on the provided data and do not invent information.
"""

_PROMPTS = {
    "weekly": WEEKLY_PROMPT,
    "monthly": MONTHLY_PROMPT,
}


def get_report_system_prompt(report_type: str) -> str:
    return DATA_CONTEXT_PREAMBLE + _PROMPTS.get(str(report_type), DEFAULT_PROMPT)


def get_report_token_budget(report_type: str) -> int:
    return REPORT_TOKEN_BUDGETS.get(str(report_type), DEFAULT_REPORT_TOKEN_BUDGET)


def format_board_digest(snapshot: BoardSnapshot) -> str:
    """Render a snapshot as the Markdown digest sent to the model."""
    board = snapshot.board
    lines: List[str] = [f"# Board: {board.name}", ""]
    if board.description:
        lines += [f"Description: {board.description}", ""]

    lines += [f"## Members ({len(snapshot.members)})", ""]
    for member in snapshot.members:
        lines.append(f"- {member.full_name} (@{member.username})")
    lines.append("")

    lines += ["## Lists and Cards", ""]
    cards_by_list = snapshot.cards_by_list()
    for board_list in snapshot.lists:
        lines += [f"### List: {board_list.name}", ""]
        list_cards = cards_by_list.get(board_list.id, [])
        if not list_cards:
            lines += ["No cards in this list.", ""]
            continue
        for card in list_cards:
            lines += _format_card(card)

    activities = snapshot.activities[:MAX_DIGEST_ACTIVITIES]
    lines += [f"## Recent Activity ({len(activities)} actions)", ""]
    for activity in activities:
        lines.append(_format_activity_line(activity))

    return "\n".join(lines).rstrip() + "\n"


def _format_card(card: Card) -> List[str]:
    lines = [f"#### Card: {card.name}", ""]
    if card.description:
        lines += [f"Description: {card.description}", ""]
    if card.due:
        lines += [f"Due: {card.due.strftime('%Y-%m-%d %H:%M')}", ""]
    if card.labels:
        labels = ", ".join(
            f"{label.name} ({label.color})" if label.color else label.name
            for label in card.labels
        )
        lines += [f"Labels: {labels}", ""]
    return lines


def _format_activity_line(activity: Activity) -> str:
    when = activity.date.strftime("%Y-%m-%d %H:%M:%S") if activity.date else "unknown date"
    return f"- {when}: {activity.actor} {describe_activity(activity)}"


def describe_activity(activity: Activity) -> str:
    """One human-readable clause per Trello action type."""
    data = activity.data
    card_name = _name(data, "card")

    if activity.type == "createCard":
        return f"created card '{card_name}' in list '{_name(data, 'list')}'"

    if activity.type == "updateCard":
        if "listBefore" in data and "listAfter" in data:
            return (
                f"moved card '{card_name}' from '{_name(data, 'listBefore')}' "
                f"to '{_name(data, 'listAfter')}'"
            )
        return f"updated card '{card_name}'"

    if activity.type == "commentCard":
        return f"commented on '{card_name}': '{data.get('text', '')}'"

    if activity.type == "addMemberToCard":
        return f"added {_name(data, 'member')} to card '{card_name}'"

    if activity.type == "removeMemberFromCard":
        return f"removed {_name(data, 'member')} from card '{card_name}'"

    return f"performed action '{activity.type}' on board '{_name(data, 'board')}'"


def _name(data: dict, key: str) -> str:
    value = data.get(key)
    if isinstance(value, dict):
        return value.get("name", "")
    return ""
