"""Prompt phrase composition.

Everything here is a pure function of the target length, a length-indexed
word bank and a random source, with no game state involved.
"""
import logging
import random
from collections import defaultdict
from typing import Dict, List, Optional

log = logging.getLogger(__name__)

MAX_ATTEMPTS = 200

WORDS = (
    "a i "
    "go do up no it in on we me to at an am as by he hi if is of or so us be my ox ok "
    "cat dog sun sky run red big kid fun map box pen cup bag hat cap bat bus car bed "
    "top log bug ant bee web key jam ice sea row win toy hug lap sit fix mix hop dig "
    "game code play time jump move good fast slow read type home word line page math "
    "desk book ball room star tree door talk walk show test quiz rule kind safe help "
    "join save need want work file menu open send site link text data user fact idea "
    "plan goal blue "
    "skill learn smart quick brain mouse board write score level speed point think "
    "share click start class short light sound green brown stick press space shift "
    "enter arrow above below track happy funny great proud brave focus group essay "
    "paper notes rules tools build draft "
    "school rocket friend castle planet bridge forest dragon letter number online "
    "screen middle person second answer choose random player delete insert search "
    "select export import social window dialog button volume camera tablet upload "
    "typing coding output cursor submit create record memory policy symbol battle "
    "student teacher monster victory awesome rainbow picture library project example "
    "message profile improve drawing history science monitor village journey fantasy "
    "courage respect problem choices grammar timeout account privacy caution connect "
    "replies subject balance percent careful "
    "keyboard computer language strategy learning distance sentence accuracy movement "
    "velocity internet notebook username password download homework research solution "
    "activity settings document feedback creation overview security practice tracking "
    "managing software database dinosaur "
    "challenge adventure classroom important direction attention fantastic knowledge "
    "character rectangle algorithm magnitude objective education paragraph organizer "
    "sensitive interface invisible difficult automatic community "
    "schoolwork technology confidence motivation completion leadership definition "
    "creativity connection navigation evaluation generation background controller "
    "percentage regulation validation prediction electronic programmer classmates "
    "processing recordings"
).split()


def index_by_length(words) -> Dict[int, List[str]]:
    bank = defaultdict(list)
    for w in words:
        bank[len(w)].append(w.lower())
    return dict(bank)


WORD_BANK = index_by_length(WORDS)


def _search(remaining, lengths, rng, budget) -> Optional[List[int]]:
    # every word after the first costs one extra char for its leading space
    choices = [n for n in lengths if n == remaining or n + 1 < remaining]
    rng.shuffle(choices)
    for n in choices:
        if budget[0] <= 0:
            return None
        budget[0] -= 1
        rest = remaining - n
        if rest == 0:
            return [n]
        tail = _search(rest - 1, lengths, rng, budget)
        if tail is not None:
            return [n] + tail
    return None


def compose_exact(target: int, bank: Dict[int, List[str]], rng=random,
                  max_attempts: int = MAX_ATTEMPTS) -> Optional[List[str]]:
    """Pick words whose space-joined text is exactly ``target`` chars long.

    Randomized backtracking over word lengths, bounded by ``max_attempts``
    visited nodes. Best effort: returns None when the budget runs out, which
    does not prove that no combination exists.
    """
    lengths = sorted(n for n, ws in bank.items() if ws and n > 0)
    if target < 1 or not lengths:
        return None
    plan = _search(target, lengths, rng, [max_attempts])
    if plan is None:
        return None
    return [rng.choice(bank[n]) for n in plan]


def compose_at_least(target: int, bank: Dict[int, List[str]], rng=random) -> List[str]:
    """Greedy composer: longest fitting words until the text reaches ``target``.

    Always succeeds for a non-empty bank; the result may overshoot.
    """
    lengths = sorted(n for n, ws in bank.items() if ws and n > 0)
    if not lengths:
        raise ValueError("word bank is empty")
    words, total = [], 0
    target = max(1, target)
    while total < target:
        if words:
            total += 1  # space
        remaining = max(1, target - total)
        fitting = [n for n in lengths if n <= remaining]
        n = fitting[-1] if fitting else lengths[0]
        words.append(rng.choice(bank[n]))
        total += n
    return words


def compose_prompt(target: int, bank: Optional[Dict[int, List[str]]] = None, rng=random,
                   max_attempts: int = MAX_ATTEMPTS) -> str:
    bank = WORD_BANK if bank is None else bank
    target = max(1, target)
    words = compose_exact(target, bank, rng, max_attempts)
    if words is None:
        words = compose_at_least(target, bank, rng)
        log.warning("no exact %d-char phrase found, using %d chars", target,
                    len(" ".join(words)))
    return " ".join(words)
