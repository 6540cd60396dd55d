# -*- coding: utf-8 -*-
"""
Built-in macro library for the RMS+ preprocessor.

Every entry of MACROS maps an upper case directive name to
  {'arity': <number of numeric arguments>, 'expand': <function>}
where expand(*args) returns the list of script lines replacing the directive.
  * arity 1 takes a float radius
  * arity 2 takes a float radius and an integer angle (degrees)

The map is assumed to be 100x100 tiles, centered at (50, 50).
"""

import math


NUM_TILES = 100
CENTER_X = NUM_TILES // 2
CENTER_Y = CENTER_X


def arctan(y: float, x: float) -> float:
    """
    Same as math.atan2(y, x), but the result is in [0, 2*pi).
    """
    a = math.atan2(y, x)
    if a >= 0.0:
        return a
    return a + math.tau


def arctanCenter(point: tuple[int, int]) -> float:
    x, y = point
    return arctan(y - CENTER_Y, x - CENTER_X)


def roundHalfUp(x: float) -> int:
    # python's round() is banker's rounding, tile math wants 0.5 -> 1
    return math.floor(x + 0.5)


"""
:'######::'########:::'#######::'##::::'##:'########:'########:'########::'##:::'##:
'##... ##: ##.... ##:'##.... ##: ###::'###: ##.....::... ##..:: ##.... ##:. ##:'##::
 ##:::..:: ##:::: ##: ##:::: ##: ####'####: ##:::::::::: ##:::: ##:::: ##::. ####:::
 ##::'####: ########:: ##:::: ##: ## ### ##: ######::::::: ##:::: ########::::. ##::::
 ##::: ##:: ##.. ##::: ##:::: ##: ##. #: ##: ##...:::::::: ##:::: ##.. ##:::::: ##::::
 ##::: ##:: ##::. ##:: ##:::: ##: ##:.:: ##: ##::::::::::: ##:::: ##::. ##::::: ##::::
. ######::: ##:::. ##:. #######:: ##:::: ##: ########:::: ##:::: ##:::. ##:::: ##::::
:......::::..:::::..:::.......:::..:::::..::........:::::..:::::..:::::..:::::..:::::
"""


def getCirclePoints(radius: float) -> list[tuple[int, int]]:
    """
    Return the map tiles whose distance to the map center is within 0.25 of
    radius, sorted counter-clockwise around the center.
    """
    points = []
    for x in range(NUM_TILES):
        for y in range(NUM_TILES):
            dist = math.hypot(x - CENTER_X, y - CENTER_Y)
            if abs(dist - radius) <= 0.25:
                points.append((x, y))
    if not points:
        raise ValueError(f'No map tile lies on a circle of radius {radius}')
    points.sort(key=arctanCenter)
    return points


def getSquarePoints(low: int, high: int, inner: tuple[int, int]) -> list[tuple[int, int]]:
    """
    Return the tiles of a square ring with sides at low and high.
    inner is the range of the side coordinate, inclusive.
    """
    points = []
    for i in range(inner[0], inner[1] + 1):
        points.append((i, low))
        points.append((low, i))
        points.append((i, high))
        points.append((high, i))
    points.sort(key=arctanCenter)
    return points


def fortressPoints(radius: float) -> list[tuple[int, int]]:
    # keeps the bases near the edges while avoiding the corners
    return getSquarePoints(20, 80, (25, 75))


def migrationPoints(radius: float) -> list[tuple[int, int]]:
    return getSquarePoints(10, 90, (10, 90))


def select100Points(points: list[tuple[int, int]]) -> list[tuple[int, int]]:
    return [points[roundHalfUp(i * len(points) / 100) % len(points)] for i in range(100)]


def getPointOffsets(points: list[tuple[int, int]], angle: int) -> tuple[int, int]:
    """
    Return (left, right) such that points[left..right] are the usable P2
    positions when P1 stands on points[0]: at least angle degrees away from
    P1 in both directions.
    """
    endAngle = 360.0 - angle
    left = None
    right = None
    theta0 = arctanCenter(points[0])
    for index, point in enumerate(points):
        theta = math.degrees(arctanCenter(point) - theta0)
        if theta >= angle and left is None:
            left = index
        if theta > endAngle and right is None:
            right = index - 1
            break
    if left is None or right is None or left > right:
        raise ValueError(f'No P2 position is at least {angle} degrees away from P1')
    return left, right


def renormalizeProbabilities(probs: list[int], left: int, right: int) -> None:
    """
    Adjust probs in place so that it sums up to exactly 100.
    Missing weight goes to the middle of [left, right],
    excess weight is shaved from the outermost nonzero entries.
    """
    total = sum(probs)
    if total < 100:
        probs[(left + right) // 2] += 100 - total
        return
    i = 0
    while probs[i] == 0:
        i += 1
    j = len(probs) - 1
    while probs[j] == 0:
        j -= 1
    while total > 100:
        x = probs[i]
        y = probs[j]
        if x >= y:
            probs[i] = x - 1
            if x == 1:
                i += 1
        else:
            probs[j] = y - 1
            if y == 1:
                j -= 1
        total -= 1


def probabilities(left: int, right: int) -> list[int]:
    """
    Return 100 integer percents, nonzero only on [left, right], shaped like a
    bell curve centered between left and right and summing to 100.
    """
    if not 0 < left <= right < 100:
        raise ValueError(f'Invalid probability range [{left}, {right}]')
    mu = (left + right) / 2.0
    sigma = left / 2.0
    weights = []
    for i in range(100):
        if i < left or i > right:
            weights.append(0.0)
            continue
        z = (i - mu) / sigma
        weights.append(1.0 / sigma * math.sqrt(math.tau) * math.exp(-0.5 * z * z))
    total = sum(weights)
    probs = [roundHalfUp(w / total * 100.0) for w in weights]
    renormalizeProbabilities(probs, left, right)
    return probs


"""
'##::::::::::'###::::'########::'########:'##::::::::'######::
 ##:::::::::'## ##::: ##.... ##: ##.....:: ##:::::::'##... ##:
 ##::::::::'##:. ##:: ##:::: ##: ##::::::: ##::::::: ##:::..::
 ##:::::::'##:::. ##: ########:: ######::: ##:::::::. ######::
 ##::::::: #########: ##.... ##: ##...:::: ##::::::::..... ##:
 ##::::::: ##.... ##: ##:::: ##: ##::::::: ##:::::::'##::: ##:
 ########: ##:::: ##: ########:: ########: ########:. ######::
........::..:::::..::........:::........::........:::......:::
"""


def listP1RandomSelection() -> list[str]:
    lines = ['start_random']
    for i in range(100):
        lines.append(f'percent_chance 1 #define P1_POINT_{i}')
    lines.append('end_random')
    return lines


def listP2RandomSelection(points: list[tuple[int, int]], angle: int) -> list[str]:
    left, right = getPointOffsets(points, angle)
    lines = ['start_random']
    for i, prob in enumerate(probabilities(left, right)):
        if prob > 0:
            lines.append(f'percent_chance {prob} #define P2_OFFSET_{i}')
    lines.append('end_random')
    return lines


def makeLabelDefinitions(pointSource, checkAngle: bool):
    def expand(radius: float, angle: int) -> list[str]:
        if checkAngle and not 90 <= angle <= 135:
            raise ValueError(f'{angle} is not in 90..=135')
        points = select100Points(pointSource(radius))
        return listP1RandomSelection() + listP2RandomSelection(points, angle)
    return expand


"""
'########:::'#######:::'######::'####:'########:'####::'#######::'##::: ##:
 ##.... ##:'##.... ##:'##... ##:. ##::... ##..::. ##::'##.... ##: ###:: ##:
 ##:::: ##: ##:::: ##: ##:::..::: ##::::: ##::::: ##:: ##:::: ##: ####: ##:
 ########:: ##:::: ##:. ######::: ##::::: ##::::: ##:: ##:::: ##: ## ## ##:
 ##.....::: ##:::: ##::..... ##:: ##::::: ##::::: ##:: ##:::: ##: ##. ####:
 ##:::::::: ##:::: ##:'##::: ##:: ##::::: ##::::: ##:: ##:::: ##: ##:. ###:
 ##::::::::. #######::. ######::'####:::: ##::::'####:. #######:: ##::. ##:
..::::::::::.......::::......:::....:::::..:::::....:::.......:::..::::..::
"""


def makeP1Positions(pointSource):
    def expand(radius: float) -> list[str]:
        points = select100Points(pointSource(radius))
        lines = []
        delim = 'if'
        for i, (x, y) in enumerate(points):
            lines.append(f'{delim} P1_POINT_{i}')
            lines.append(f'land_position {x} {y}')
            delim = 'elseif'
        lines.append('endif')
        return lines
    return expand


def makeP2Positions(pointSource):
    def expand(radius: float, angle: int) -> list[str]:
        points = select100Points(pointSource(radius))
        left, right = getPointOffsets(points, angle)
        lines = []
        outerDelim = 'if'
        for i in range(len(points)):
            lines.append(f'{outerDelim} P1_POINT_{i}')
            innerDelim = 'if'
            for j in range(left, right + 1):
                x, y = points[(i + j) % 100]
                lines.append(f'{innerDelim} P2_OFFSET_{j}')
                lines.append(f'land_position {x} {y}')
                innerDelim = 'elseif'
            lines.append('endif')
            outerDelim = 'elseif'
        lines.append('endif')
        return lines
    return expand


"""
:::'###:::::'######::'########::'#######::'########:::'######::
::'## ##:::'##... ##:... ##..::'##.... ##: ##.... ##:'##... ##:
:'##:. ##:: ##:::..::::: ##:::: ##:::: ##: ##:::: ##: ##:::..::
'##:::. ##: ##:::::::::: ##:::: ##:::: ##: ########::. ######::
 #########: ##:::::::::: ##:::: ##:::: ##: ##.. ##::::..... ##:
 ##.... ##: ##::: ##:::: ##:::: ##:::: ##: ##::. ##::'##::: ##:
 ##:::: ##:. ######::::: ##::::. #######:: ##:::. ##:. ######::
..:::::..:::......::::::..::::::.......:::..:::::..:::......:::
"""


def makeConstants() -> list[str]:
    """
    Placeholder constants. HERDABLE_A and STRAGGLER are left to each script.
    """
    lines = [
        '#const PHOFF 649',
        '#const PHON 1291',
        '#const TERRAIN_BLOCKER 1613',
        '#const TEMPORARY_REVEALER 651',
        '#const TRIBUTE_INEFFICIENCY 46',
    ]
    # 590 VILLAGER_SHEPHERD_F, 592 VILLAGER_SHEPHERD_M
    for i in range(6):
        lines.append('start_random')
        lines.append(f'percent_chance 50 #const SHEP{i} 590')
        lines.append(f'percent_chance 50 #const SHEP{i} 592')
        lines.append('end_random')
    # 123 VILLAGER_WOOD_M, 218 VILLAGER_WOOD_F
    for i in range(3):
        lines.append('start_random')
        lines.append(f'percent_chance 50 #const LUMBERJACK{i} 123')
        lines.append(f'percent_chance 50 #const LUMBERJACK{i} 218')
        lines.append('end_random')
    return lines


def vision() -> list[str]:
    return [
        'create_object TEMPORARY_REVEALER {',
        'number_of_objects 4',
        'actor_area_to_place_in box0',
        'set_place_for_every_player',
        'max_distance_to_players 2',
        '}',
    ]


MACROS = {
    '#CIRCLE_LABELS': {'arity': 2, 'expand': makeLabelDefinitions(getCirclePoints, True)},
    '#CIRCLE_POSITION_P1': {'arity': 1, 'expand': makeP1Positions(getCirclePoints)},
    '#CIRCLE_POSITION_P2': {'arity': 2, 'expand': makeP2Positions(getCirclePoints)},
    '#SQUARE_LABELS': {'arity': 2, 'expand': makeLabelDefinitions(fortressPoints, False)},
    '#SQUARE_POSITION_P1': {'arity': 1, 'expand': makeP1Positions(fortressPoints)},
    '#SQUARE_POSITION_P2': {'arity': 2, 'expand': makeP2Positions(fortressPoints)},
    '#MIGRA_LABELS': {'arity': 2, 'expand': makeLabelDefinitions(migrationPoints, False)},
    '#MIGRA_POSITION_P1': {'arity': 1, 'expand': makeP1Positions(migrationPoints)},
    '#MIGRA_POSITION_P2': {'arity': 2, 'expand': makeP2Positions(migrationPoints)},
    '#MKCONSTS': {'arity': 0, 'expand': makeConstants},
    '#VISION': {'arity': 0, 'expand': vision},
}
