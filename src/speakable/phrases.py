"""Fixed spoken fragments, one catalog per language.

Placeholders that stand in for something unsayable (a URL, a spoiler, an
unresolvable mention) carry surrounding spaces so they never glue onto the
neighbouring words.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Phrases:
    url_omitted: str
    spoiler: str
    code: str
    code_in: str  # {lang}
    unknown_user: str
    unknown_channel: str
    unknown_role: str
    command: str  # {name}
    everyone: str
    here: str
    unknown_date: str
    now: str
    media_post: str
    external_message: str
    external_channel: str
    unknown_message: str
    channel_message: str  # {name}


JA = Phrases(
    url_omitted=" URL省略 ",
    spoiler=" 伏字 ",
    code=" コード ",
    code_in=" {lang}のコード ",
    unknown_user=" 不明なユーザー ",
    unknown_channel=" 不明なチャンネル ",
    unknown_role=" 不明なロール ",
    command=" {name}コマンド ",
    everyone=" @エブリワン ",
    here=" @ヒア ",
    unknown_date=" 不明な日付 ",
    now="今",
    media_post=" メディアポスト ",
    external_message=" 外部サーバーのメッセージ ",
    external_channel=" 外部サーバーのチャンネル ",
    unknown_message=" 不明なメッセージ ",
    channel_message="{name}のメッセージ",
)

EN = Phrases(
    url_omitted=" URL omitted ",
    spoiler=" redacted ",
    code=" code ",
    code_in=" {lang} code ",
    unknown_user=" unknown user ",
    unknown_channel=" unknown channel ",
    unknown_role=" unknown role ",
    command=" {name} command ",
    everyone=" at everyone ",
    here=" at here ",
    unknown_date=" unknown date ",
    now="now",
    media_post=" media post ",
    external_message=" message on another server ",
    external_channel=" channel on another server ",
    unknown_message=" unknown message ",
    channel_message="{name}'s message",
)

CATALOGS: dict[str, Phrases] = {"ja": JA, "en": EN}

DEFAULT_LANGUAGE = "ja"


def phrases_for(locale: str) -> Phrases:
    """Pick the catalog for *locale*'s language subtag (``en-GB`` → ``en``).

    Languages without a catalog fall back to Japanese.
    """
    language = locale.replace("_", "-").split("-", 1)[0].lower()
    return CATALOGS.get(language, CATALOGS[DEFAULT_LANGUAGE])
