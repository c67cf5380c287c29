"""Prompt assembly helpers for distance requests.

This module only builds instruction strings from an already validated
`LocationQuery`. Validation, payload assembly and model invocation happen
outside this module.

Design constraints:
    - Deterministic construction for identical inputs.
    - Answers are always requested in Brazilian Portuguese.
    - No hidden side effects (no I/O, no global state mutation).

Prompt safety model:
    Place names are interpolated as raw quoted strings. Nothing is escaped;
    the model is only told which text is the origin and which the destination.
"""


# =========================================================
# PROSE PROMPT
# =========================================================
# Explanatory answer: distance, average travel time and main route.

PROSE_RULES = (
    "REGRAS:\n"
    "1. Forneça a distância exata ou estimada em quilômetros.\n"
    "2. Informe o tempo médio de viagem (carro, ônibus, etc).\n"
    "3. Descreva brevemente a principal rodovia ou rota.\n"
    "4. Responda obrigatoriamente em Português do Brasil.\n"
    "5. Se não encontrar dados exatos, forneça uma estimativa baseada em seu "
    "conhecimento geográfico."
)


def build_prose_prompt(origin: str, destination: str) -> str:
    """Build the explanatory distance/travel-time instruction.

    Args:
        origin: Origin place name as entered by the user.
        destination: Destination place name as entered by the user.

    Returns:
        Prompt string with expert role, the quoted places and fixed rules.
    """
    return (
        "Você é um especialista em rotas e geografia.\n"
        "Calcule a distância e o tempo de viagem entre a origem: "
        f"\"{origin}\" e o destino: \"{destination}\".\n\n"
        f"{PROSE_RULES}"
    )


# =========================================================
# TERSE PROMPT
# =========================================================
# Single fixed-format line. The adapter still extracts the `Total KM:` token
# afterwards because models sometimes add text anyway.

TERSE_LINE_FORMAT = "Total KM: <número>"


def build_terse_prompt(origin: str, destination: str) -> str:
    """Build the strict single-line `Total KM: <number>` instruction."""
    return (
        "Você é um especialista em rotas e geografia.\n"
        "Calcule a distância rodoviária em quilômetros entre a origem: "
        f"\"{origin}\" e o destino: \"{destination}\".\n\n"
        "REGRAS:\n"
        f"1. Responda com exatamente uma linha no formato: {TERSE_LINE_FORMAT}\n"
        "2. Use apenas números no valor, sem unidades adicionais.\n"
        "3. Não inclua nenhum outro texto, explicação ou comentário.\n"
        "4. Responda obrigatoriamente em Português do Brasil."
    )
