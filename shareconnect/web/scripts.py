"""
JavaScript snippets run inside a service's Web UI, and the per-service
strategies that decide which of them to run.

Selectors are tried in order; the first visible match wins. Scripts are
plain expressions that evaluate to a short status string so any host able to
evaluate JavaScript can drive them.
"""

import json
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from shareconnect.models.profile import ServiceKind, TorrentClient

# Script results
LOGIN_SUBMITTED = "submitted"
INJECT_FILLED = "filled"
INJECT_OPENED = "opened"
NOT_FOUND = "missing"

USERNAME_SELECTORS = (
    'input[name="username"]',
    'input[id="username"]',
    "#username",
    'input[type="text"]',
)
PASSWORD_SELECTORS = (
    'input[name="password"]',
    'input[id="password"]',
    "#password",
    'input[type="password"]',
)
SUBMIT_SELECTORS = (
    'input[type="submit"]',
    'button[type="submit"]',
    "#login",
    ".login-button",
    'input[value*="Login"]',
    'button[onclick*="login"]',
)

QBITTORRENT_URL_FIELDS = (
    'textarea[name="urls"]',
    'input[name="urls"]',
    "#urls",
    'textarea[placeholder*="URL"]',
    'textarea[placeholder*="url"]',
    'textarea[placeholder*="magnet"]',
    'input[placeholder*="URL"]',
    'input[placeholder*="url"]',
    'input[placeholder*="magnet"]',
    'input[type="url"]',
    "#url",
)
QBITTORRENT_ADD_BUTTONS = (
    "#downloadButton",
    'a[title*="Add Torrent Link"]',
    'button[title*="Add"]',
    '.toolbar button[title*="Add"]',
    'button[onclick*="add"]',
    ".add-button",
)
QBITTORRENT_SUBMIT_BUTTONS = (
    "#submitButton",
    'button[type="submit"]',
    'input[type="submit"]',
    'input[value*="Download"]',
)

TRANSMISSION_URL_FIELDS = (
    "#torrent-upload-url",
    'input[name="url"]',
    'input[type="url"]',
    'input[type="text"]',
    "textarea",
)
TRANSMISSION_ADD_BUTTONS = (
    "#toolbar-open",
    "#toolbar-add",
    ".toolbar-add",
    'button[title*="Add"]',
    'button[title*="Open"]',
)

_LOGIN_TEMPLATE = """(function() {
  var creds = %(creds)s;
  function find(selectors) {
    for (var i = 0; i < selectors.length; i++) {
      var el = null;
      try { el = document.querySelector(selectors[i]); } catch (e) { continue; }
      if (el && el.offsetParent !== null) return el;
    }
    return null;
  }
  function fill(el, value) {
    el.focus();
    el.value = value;
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
  }
  var password = find(%(password)s);
  if (!password) return '%(missing)s';
  if (creds.username !== null) {
    var username = find(%(username)s);
    if (username && username !== password) fill(username, creds.username);
  }
  fill(password, creds.password);
  var submit = find(%(submit)s);
  if (submit) {
    submit.click();
  } else if (password.form) {
    if (password.form.requestSubmit) password.form.requestSubmit(); else password.form.submit();
  } else {
    password.dispatchEvent(new KeyboardEvent('keydown', { key: 'Enter', keyCode: 13, bubbles: true }));
  }
  return '%(submitted)s';
})()"""

_INJECT_TEMPLATE = """(function() {
  var url = %(url)s;
  function find(selectors) {
    for (var i = 0; i < selectors.length; i++) {
      var el = null;
      try { el = document.querySelector(selectors[i]); } catch (e) { continue; }
      if (el && el.offsetParent !== null && !el.disabled) return el;
    }
    return null;
  }
  var field = find(%(fields)s);
  if (field) {
    field.focus();
    field.value = url;
    ['input', 'change', 'paste', 'keyup', 'blur'].forEach(function(name) {
      field.dispatchEvent(new Event(name, { bubbles: true }));
    });
    var submit = find(%(submit)s);
    if (submit) submit.click();
    return '%(filled)s';
  }
  var button = find(%(buttons)s);
  if (button) {
    button.click();
    return '%(opened)s';
  }
  return '%(missing)s';
})()"""


@dataclass(frozen=True)
class LoginStrategy:
    """How to sign in to a Web UI, and how long to wait afterwards."""

    settle_delay: float
    fill_username: bool = True
    username_selectors: Sequence[str] = USERNAME_SELECTORS
    password_selectors: Sequence[str] = PASSWORD_SELECTORS
    submit_selectors: Sequence[str] = SUBMIT_SELECTORS

    def script(self, username: Optional[str], password: Optional[str]) -> str:
        creds = {
            "username": username if self.fill_username else None,
            "password": password or "",
        }
        return _LOGIN_TEMPLATE % {
            "creds": json.dumps(creds),
            "username": json.dumps(list(self.username_selectors)),
            "password": json.dumps(list(self.password_selectors)),
            "submit": json.dumps(list(self.submit_selectors)),
            "missing": NOT_FOUND,
            "submitted": LOGIN_SUBMITTED,
        }


@dataclass(frozen=True)
class InjectionStrategy:
    """Where to paste a URL in a Web UI."""

    field_selectors: Sequence[str]
    add_button_selectors: Sequence[str] = ()
    submit_selectors: Sequence[str] = ()

    def script(self, url: str) -> str:
        return _INJECT_TEMPLATE % {
            "url": json.dumps(url),
            "fields": json.dumps(list(self.field_selectors)),
            "buttons": json.dumps(list(self.add_button_selectors)),
            "submit": json.dumps(list(self.submit_selectors)),
            "filled": INJECT_FILLED,
            "opened": INJECT_OPENED,
            "missing": NOT_FOUND,
        }


@dataclass(frozen=True)
class SessionStrategy:
    login: Optional[LoginStrategy] = None
    injection: Optional[InjectionStrategy] = None


StrategyKey = Tuple[ServiceKind, Optional[TorrentClient]]

STRATEGIES: Dict[StrategyKey, SessionStrategy] = {
    (ServiceKind.TORRENT, TorrentClient.QBITTORRENT): SessionStrategy(
        login=LoginStrategy(settle_delay=3.0),
        injection=InjectionStrategy(
            field_selectors=QBITTORRENT_URL_FIELDS,
            add_button_selectors=QBITTORRENT_ADD_BUTTONS,
            submit_selectors=QBITTORRENT_SUBMIT_BUTTONS,
        ),
    ),
    # Transmission authenticates at the HTTP level.
    (ServiceKind.TORRENT, TorrentClient.TRANSMISSION): SessionStrategy(
        injection=InjectionStrategy(
            field_selectors=TRANSMISSION_URL_FIELDS,
            add_button_selectors=TRANSMISSION_ADD_BUTTONS,
        ),
    ),
    # uTorrent's login page only asks for the password.
    (ServiceKind.TORRENT, TorrentClient.UTORRENT): SessionStrategy(
        login=LoginStrategy(
            settle_delay=2.0,
            fill_username=False,
            password_selectors=('input[name="password"]', 'input[type="password"]'),
            submit_selectors=('input[type="submit"]', 'button[type="submit"]'),
        ),
    ),
    (ServiceKind.JDOWNLOADER, None): SessionStrategy(),
}
