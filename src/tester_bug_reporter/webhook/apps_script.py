"""Spreadsheet-side companion script for the webhook.

The operator pastes this Google Apps Script into the target spreadsheet and
deploys it as a web app; its URL becomes the webhook URL. The script is
consumed as text only.
"""

from __future__ import annotations

SHEET_COLUMNS: tuple[str, ...] = (
    "Timestamp",
    "Title",
    "Description",
    "Severity",
    "Status",
    "URL",
    "Browser",
    "Steps",
)

SETUP_STEPS: tuple[str, ...] = (
    "Create a new Google Sheet",
    "Open Extensions -> Apps Script",
    "Paste the script below and save",
    "Click Deploy -> New deployment",
    "Choose the type 'Web app'",
    "Set 'Execute as: Me' and 'Who has access: Anyone'",
    "Copy the web app URL and save it as the webhook URL",
)

_HEADER = ", ".join(f"'{c}'" for c in SHEET_COLUMNS)

APPS_SCRIPT_SOURCE = f"""function doPost(e) {{
  try {{
    var sheet = SpreadsheetApp.getActiveSheet();
    var data = JSON.parse(e.postData.contents);

    if (sheet.getLastRow() === 0) {{
      sheet.getRange(1, 1, 1, {len(SHEET_COLUMNS)}).setValues([[{_HEADER}]]);
    }}

    sheet.appendRow([
      new Date(data.timestamp),
      data.title,
      data.description,
      data.severity,
      data.status,
      data.url || '',
      data.browser || '',
      data.steps || ''
    ]);

    return ContentService
      .createTextOutput(JSON.stringify({{result: 'success'}}))
      .setMimeType(ContentService.MimeType.JSON);
  }} catch (error) {{
    return ContentService
      .createTextOutput(JSON.stringify({{result: 'error', error: error.toString()}}))
      .setMimeType(ContentService.MimeType.JSON);
  }}
}}
"""


def setup_instructions() -> str:
    lines = [f"{i}. {step}" for i, step in enumerate(SETUP_STEPS, start=1)]
    return "\n".join(lines) + "\n\n" + APPS_SCRIPT_SOURCE
