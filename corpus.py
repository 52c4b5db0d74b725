"""Reference name corpus used for suggestions.

The first 151 Pokemon plus popular names from later generations. The corpus
is static: `load_corpus` returns an immutable, deduplicated tuple that is
built once and shared by every request.
"""

COMMON_POKEMON_NAMES = (
    'bulbasaur', 'ivysaur', 'venusaur', 'charmander', 'charmeleon', 'charizard',
    'squirtle', 'wartortle', 'blastoise', 'caterpie', 'metapod', 'butterfree',
    'weedle', 'kakuna', 'beedrill', 'pidgey', 'pidgeotto', 'pidgeot',
    'rattata', 'raticate', 'spearow', 'fearow', 'ekans', 'arbok',
    'pikachu', 'raichu', 'sandshrew', 'sandslash', 'nidoran', 'nidorina',
    'nidoqueen', 'nidorino', 'nidoking', 'clefairy', 'clefable', 'vulpix',
    'ninetales', 'jigglypuff', 'wigglytuff', 'zubat', 'golbat', 'oddish',
    'gloom', 'vileplume', 'paras', 'parasect', 'venonat', 'venomoth',
    'diglett', 'dugtrio', 'meowth', 'persian', 'psyduck', 'golduck',
    'mankey', 'primeape', 'growlithe', 'arcanine', 'poliwag', 'poliwhirl',
    'poliwrath', 'abra', 'kadabra', 'alakazam', 'machop', 'machoke',
    'machamp', 'bellsprout', 'weepinbell', 'victreebel', 'tentacool', 'tentacruel',
    'geodude', 'graveler', 'golem', 'ponyta', 'rapidash', 'slowpoke',
    'slowbro', 'magnemite', 'magneton', 'farfetchd', 'doduo', 'dodrio',
    'seel', 'dewgong', 'grimer', 'muk', 'shellder', 'cloyster',
    'gastly', 'haunter', 'gengar', 'onix', 'drowzee', 'hypno',
    'krabby', 'kingler', 'voltorb', 'electrode', 'exeggcute', 'exeggutor',
    'cubone', 'marowak', 'hitmonlee', 'hitmonchan', 'lickitung', 'koffing',
    'weezing', 'rhyhorn', 'rhydon', 'chansey', 'tangela', 'kangaskhan',
    'horsea', 'seadra', 'goldeen', 'seaking', 'staryu', 'starmie',
    'mr-mime', 'scyther', 'jynx', 'electabuzz', 'magmar', 'pinsir',
    'tauros', 'magikarp', 'gyarados', 'lapras', 'ditto', 'eevee',
    'vaporeon', 'jolteon', 'flareon', 'porygon', 'omanyte', 'omastar',
    'kabuto', 'kabutops', 'aerodactyl', 'snorlax', 'articuno', 'zapdos',
    'moltres', 'dratini', 'dragonair', 'dragonite', 'mewtwo', 'mew',
    # popular gen 2-3
    'chikorita', 'cyndaquil', 'totodile', 'lugia', 'ho-oh', 'mudkip',
    'torchic', 'treecko', 'rayquaza', 'groudon', 'kyogre',
    # popular gen 4+
    'lucario', 'garchomp', 'dialga', 'palkia', 'giratina', 'arceus',
    'zoroark', 'reshiram', 'zekrom', 'kyurem', 'xerneas', 'yveltal',
    'zygarde', 'solgaleo', 'lunala', 'necrozma', 'zacian', 'zamazenta',
    'eternatus', 'koraidon', 'miraidon',
)


def load_corpus(names=None):
    """Return a deduplicated tuple of names, preserving first-seen order.

    Defaults to COMMON_POKEMON_NAMES. Blank and non-string entries are dropped.
    """
    if names is None:
        names = COMMON_POKEMON_NAMES
    seen = set()
    out = []
    for n in names:
        if not isinstance(n, str) or not n.strip():
            continue
        key = n.strip().casefold()
        if key in seen:
            continue
        seen.add(key)
        out.append(n.strip())
    return tuple(out)
