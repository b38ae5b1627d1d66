"""
Notion access for the weekly recap database.

Each week is one page in the recap database, titled "Week 7 Recap" (or
"Week 07 Recap", "Week 7", "Week 07"). Summary and recap text lives in
rich-text properties on that page.

The store is built once at startup and handed to whatever needs it:

    store = NotionRecapStore(token, database_id)
    page = store.find_week_page(7)
    good = store.read_field(page, 'Personal - What went well?')
"""

import requests

NOTION_API_URL = 'https://api.notion.com/v1'
NOTION_VERSION = '2022-06-28'


class NotionError(RuntimeError):
    pass


def utf16_length(text: str) -> int:
    return len((text or '').encode('utf-16-le')) // 2


def truncate_for_notion(text: str, limit: int = 2000) -> str:
    """Clip text to the rich text length Notion accepts.

    Notion counts UTF-16 code units, so emoji outside the basic plane
    count twice. A cut that would split a surrogate pair drops the whole
    character.
    """
    text = text or ''
    if utf16_length(text) <= limit:
        return text

    encoded = text.encode('utf-16-le')[:limit * 2]
    # A dangling high surrogate (D800-DBFF) means the cut split a pair.
    if len(encoded) >= 2 and 0xD800 <= int.from_bytes(encoded[-2:], 'little') <= 0xDBFF:
        encoded = encoded[:-2]
    return encoded.decode('utf-16-le')


def week_titles(week: int) -> set[str]:
    padded = f"{week:02d}"
    return {
        f"Week {week} Recap",
        f"Week {padded} Recap",
        f"Week {week}",
        f"Week {padded}",
    }


MONTH_NAMES = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


def month_titles(month: int) -> set[str]:
    padded = f"{month:02d}"
    return {
        f"{padded}. {MONTH_NAMES[month - 1]} Recap",
        f"Month {month} Recap",
        f"Month {padded} Recap",
        f"Month {month}",
        f"Month {padded}",
    }


class NotionRecapStore:
    def __init__(self, token: str, database_id: str, *,
                 title_property: str = 'Week Recap', timeout: int = 30, session=None):
        if not token:
            raise ValueError("NOTION_TOKEN not set")
        if not database_id:
            raise ValueError("Recap database id not configured (RECAP_DATABASE_ID, RECAP_MONTHS_DATABASE_ID or the config file)")

        self.token = token
        self.database_id = database_id
        self.title_property = title_property
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: dict) -> 'NotionRecapStore':
        """Build a store from recap_config.notion_settings()."""
        return cls(
            settings.get('token'),
            settings.get('database_id'),
            title_property=settings.get('title_property', 'Week Recap'),
            timeout=settings.get('timeout', 30),
        )

    def _headers(self) -> dict:
        return {
            'Authorization': f'Bearer {self.token}',
            'Notion-Version': NOTION_VERSION,
            'Content-Type': 'application/json',
        }

    def query_pages(self) -> list[dict]:
        """Return every page in the recap database (follows pagination)."""
        url = f"{NOTION_API_URL}/databases/{self.database_id}/query"
        pages = []
        payload = {}

        while True:
            try:
                resp = self.session.post(url, headers=self._headers(), json=payload, timeout=self.timeout)
            except requests.RequestException as e:
                raise NotionError(f"database query failed: {e}") from e

            if resp.status_code != 200:
                raise NotionError(f"database query failed ({resp.status_code}): {resp.text.strip()}")

            data = resp.json()
            pages.extend(data.get('results', []))
            if not data.get('has_more') or not data.get('next_cursor'):
                return pages
            payload = {'start_cursor': data['next_cursor']}

    def page_title(self, page: dict) -> str:
        prop = (page.get('properties') or {}).get(self.title_property) or {}
        return ''.join(t.get('plain_text', '') for t in prop.get('title') or [])

    def find_page(self, matches) -> dict | None:
        """First page whose stripped title satisfies `matches`, or None."""
        for page in self.query_pages():
            if matches(self.page_title(page).strip()):
                return page
        return None

    def find_week_page(self, week: int) -> dict | None:
        """Find the recap page for a week number, or None."""
        titles = week_titles(week)
        return self.find_page(lambda title: title in titles)

    def find_month_page(self, month: int) -> dict | None:
        """Find the recap page for a month (1-12), or None.

        Besides the exact titles, anything like "03. Mar - spring break" counts.
        """
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be 1-12, got {month}")
        titles = month_titles(month)
        prefix = f"{month:02d}."
        name = MONTH_NAMES[month - 1]
        return self.find_page(lambda title: title in titles or (prefix in title and name in title))

    @staticmethod
    def read_field(page: dict, field_name: str) -> str:
        """Plain text of a rich-text property; '' when missing or empty."""
        prop = (page.get('properties') or {}).get(field_name) or {}
        return ''.join(t.get('plain_text', '') for t in prop.get('rich_text') or [])

    def write_fields(self, page_id: str, fields: dict[str, str]) -> tuple[bool, str]:
        """Overwrite rich-text properties on a page. Returns (ok, message)."""
        properties = {
            name: {'rich_text': [{'text': {'content': content}}]}
            for name, content in fields.items()
        }
        url = f"{NOTION_API_URL}/pages/{page_id}"

        try:
            resp = self.session.patch(url, headers=self._headers(), json={'properties': properties},
                                      timeout=self.timeout)
        except requests.RequestException as e:
            return False, f"page update failed: {e}"

        if resp.status_code != 200:
            return False, f"page update failed ({resp.status_code}): {resp.text.strip()}"
        return True, f"updated {', '.join(fields)}"
