"""Built-in content used whenever the content backend cannot deliver a usable pool."""

from prepgames.core.models import PairData, TermData

MIN_PAIRS = 4

DEFAULT_PAIRS: list[PairData] = [
    {"id": "1", "left": "Sinal", "right": "Objetivo (ex: febre)"},
    {"id": "2", "left": "Sintoma", "right": "Subjetivo (ex: dor)"},
    {"id": "3", "left": "Etiologia", "right": "Causa da doença"},
    {"id": "4", "left": "Patogenia", "right": "Mecanismo de produção"},
    {"id": "5", "left": "Antibiótico", "right": "Combate bactérias"},
    {"id": "6", "left": "Antiviral", "right": "Combate vírus"},
    {"id": "7", "left": "Analgésico", "right": "Alivia a dor"},
    {"id": "8", "left": "Posologia", "right": "Dose e via de admin"},
    {"id": "9", "left": "Artéria", "right": "Sai do coração"},
    {"id": "10", "left": "Veia", "right": "Volta ao coração"},
    {"id": "11", "left": "Aurícula", "right": "Recebe sangue (átrio)"},
    {"id": "12", "left": "Ventrículo", "right": "Ejeta sangue"},
    {"id": "13", "left": "AVC", "right": "Derrame cerebral"},
    {"id": "14", "left": "IAM", "right": "Infarto agudo miocárdio"},
    {"id": "15", "left": "PCR", "right": "Parada cardiorrespiratória"},
    {"id": "16", "left": "TEP", "right": "Embolia pulmonar"},
    {"id": "17", "left": "Sondagem", "right": "Inserção de sonda"},
    {"id": "18", "left": "Punção", "right": "Perfuração com agulha"},
    {"id": "19", "left": "Curativo", "right": "Tratamento de ferida"},
    {"id": "20", "left": "Aspiração", "right": "Remoção de secreção"},
]

FALLBACK_TERM: TermData = {
    "id": "fallback-1",
    "term": "HIPERTENSAO",
    "hint": "Pressão alta sustentada",
    "definition": "Condição clínica caracterizada por elevação sustentada dos níveis pressóricos.",
}


def unique_pairs(pairs: list[PairData]) -> list[PairData]:
    """First pair of every id, in pool order."""
    seen: set[str] = set()
    unique: list[PairData] = []
    for pair in pairs:
        if pair["id"] in seen:
            continue
        seen.add(pair["id"])
        unique.append(pair)
    return unique


def pairs_or_fallback(pairs: list[PairData]) -> list[PairData]:
    """A round needs 4 distinct pairs (by id). Anything smaller gets replaced by the built-in pool."""
    pairs = unique_pairs(pairs)
    if len(pairs) < MIN_PAIRS:
        return [dict(pair) for pair in DEFAULT_PAIRS]
    return pairs


def terms_or_fallback(terms: list[TermData]) -> list[TermData]:
    if not terms:
        return [dict(FALLBACK_TERM)]
    return terms
