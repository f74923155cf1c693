"""Supported languages and their connector-word tables.

Connector words are prepositions, articles and conjunctions that carry little
search intent. They are only ever removed from the interior of a query (see
:func:`catalog_search.normalizer.trim_connectors`), so the tables can be
generous without hurting short queries such as ``"a sink"``.
"""
from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Optional

from .errors import UnsupportedLanguage

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES: tuple[str, ...] = (
    "pl",
    "de",
    "en",
    "ru",
    "hu",
    "ro",
    "fr",
    "it",
    "uk",
    "sl",
    "es",
)


def _words(text: str) -> FrozenSet[str]:
    return frozenset(word.lower() for word in text.split())


CONNECTOR_WORDS: Dict[str, FrozenSet[str]] = {
    "pl": _words(
        """
        a aby aż bez beze bo by byle choć czy dla do dokoła dookoła dzięki
        gdy gdyż i ich ile im jak jako jakby jednak jeśli jeżeli już ku lecz
        lub między mimo na nad nade naprzeciw natomiast nie niż o obok od ode
        oraz po pod pode podczas pomimo ponad poniżej powyżej poza przeciw
        przeciwko przed przede przez przeze przy spod spośród sprzed to tudzież
        u w we wobec wokół wraz wskutek wśród względem z za zamiast ze zza
        zgodnie żeby że albo ani ale czyli więc zaś tylko także też lub
        według około koło obok poprzez spoza znad zza
        """
    ),
    "de": _words(
        """
        ab aber als am an andere anstatt auf aus außer bei beim bis da damit
        dann das dass dem den denn der des dessen die dies diese diesem diesen
        dieser dieses doch dort durch ein eine einem einen einer eines entlang
        für gegen gegenüber hinter im in ins inklusive ist jedoch je jenseits
        mit mitsamt nach neben noch nur ob oberhalb oder ohne per samt seit
        so sondern statt trotz über um und unter unterhalb vom von vor
        während wegen weil wenn wie wider zu zum zur zwischen zwecks
        inmitten innerhalb außerhalb bezüglich dank gemäß laut mittels
        nahe seitens sowie sowohl auch beziehungsweise bzw
        """
    ),
    "en": _words(
        """
        a about above across after against along amid among an and around as
        at before behind below beneath beside besides between beyond but by
        despite down during except for from in inside into like near nor of
        off on onto or out outside over past per plus since so than that the
        then through throughout till to toward towards under underneath unlike
        until up upon versus via with within without yet is are be this these
        those its it which who whom whose both either neither also only very
        just such what when where while whereas whether
        """
    ),
    "ru": _words(
        """
        а без безо близ более будто в вблизи вместо вне внутри во возле вокруг
        вроде все всё вслед для до же за и из изо или иль к как ко кроме ли
        либо между мимо на над надо наподобие напротив насчёт насчет не ни но
        о об обо около от ото перед передо по под подо подле после посреди
        при про против ради с сверх свыше сквозь со среди так также то тоже
        у через чем что чтобы это этот эта эти сзади спереди внизу вверху
        поверх помимо согласно благодаря вопреки вдоль из-за из-под
        """
    ),
    "hu": _words(
        """
        a az és vagy de hogy is mint meg egy ha sem csak még már
        mert pedig tehát illetve valamint avagy ám azonban hanem ugyanis
        alatt alá alól által át belül bele együtt ellen előtt elé elől
        felé felett fölött fölé helyett iránt kívül körül közé között
        közül miatt mellett mellé mögé mögött nélkül szerint számára
        után végig ezért azért vele neki nála hozzá rajta
        """
    ),
    "ro": _words(
        """
        a al ale ai la în in cu de din pe pentru prin spre sub peste despre
        fără fara până pana lângă langa după dupa între intre printre dintre
        împotriva impotriva contra asupra înaintea înainte deasupra dedesubt
        înapoia alături sau ori și si iar dar însă insa ci nici că ca dacă
        daca decât decat deși desi fiindcă fiindca un o unei unui niște
        niste cel cea cei cele este sunt ca-n într într-o într-un
        """
    ),
    "fr": _words(
        """
        à a au aux avec chez contre dans de des du en entre et hors jusque
        la le les l' leur leurs mais malgré ni ou où par parmi pendant pour
        près sans selon sous sur un une vers via voici voilà d' c' qu' que
        qui quoi dont ce cet cette ces son sa ses mon ma mes ton ta tes notre
        nos votre vos depuis derrière devant après avant car donc or puis
        ainsi aussi comme lors envers outre durant excepté sauf
        """
    ),
    "it": _words(
        """
        a ad al allo alla ai agli alle anche con col coi da dal dallo dalla
        dai dagli dalle del dello della dei degli delle di e ed fra gli i il
        in nel nello nella nei negli nelle lo la le ma o od oppure per senza
        su sul sullo sulla sui sugli sulle tra un uno una verso presso
        dentro fuori sopra sotto dietro davanti dopo prima contro oltre
        circa lungo mediante tramite che chi cui se però perché quindi
        """
    ),
    "uk": _words(
        """
        а або аж але без біля в від вздовж вище внаслідок внутрі всередині
        для до же за з із зі зо й і к коло крізь крім ледве між мимо на над
        наді не ні нижче о об по під піді поміж понад попри після поза
        поруч при про проти ради серед через що щоб чи як як-от також теж
        це цей ця ці той та те ті або-або навколо замість згідно завдяки
        всупереч протягом напроти обабіч довкола
        """
    ),
    "sl": _words(
        """
        a ali brez do in iz k h ko kot med na nad ne ni niti o ob od pa po
        pod pred pri proti s z skozi čez cez za zaradi razen zraven poleg
        okoli okrog namesto glede kljub vzdolž znotraj zunaj vrh sredi
        mimo blizu nasproti onkraj tostran da če ce ker ampak vendar temveč
        tudi še samo le ta to te ti tisti tista tiste
        """
    ),
    "es": _words(
        """
        a al ante bajo cabe con contra de del desde durante e el en entre
        hacia hasta la las lo los mediante ni o para pero por según segun
        sin so sobre tras u un una unos unas y que como cuando donde mas
        más sino pues porque aunque mientras salvo excepto incluso junto
        cerca dentro fuera encima debajo delante detrás detras través
        su sus este esta estos estas ese esa esos esas
        """
    ),
}


def connector_words(language: str) -> FrozenSet[str]:
    return CONNECTOR_WORDS.get(language, frozenset())


def resolve_language(tag: Optional[str], fallback: Optional[str] = None) -> str:
    """Map a request language tag onto one of :data:`SUPPORTED_LANGUAGES`.

    Tags are matched case-insensitively and region suffixes are ignored
    (``"en-GB"`` and ``"pl_PL"`` resolve to ``"en"`` and ``"pl"``). An
    unknown tag raises :class:`UnsupportedLanguage` unless ``fallback`` is
    given, in which case the fallback is returned and a warning is logged.
    """

    primary = (tag or "").strip().lower().replace("_", "-").split("-", 1)[0]
    if primary in SUPPORTED_LANGUAGES:
        return primary
    if fallback:
        if fallback not in SUPPORTED_LANGUAGES:
            raise UnsupportedLanguage(fallback)
        logger.warning("Unsupported language %r, falling back to %r", tag, fallback)
        return fallback
    raise UnsupportedLanguage(tag or "")
