#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Convert RMS+ into plain random map script (RMS) code
Python Version: 3.12
RMS+ Version: 1.0

Supported syntax:
- #HEADER_START ... #HEADER_END: leading comment block, kept verbatim
- /* ... */: block comments, may be nested and span multiple lines
- #NAME, #NAME(radius), #NAME(radius,angle): built-in macros (see rmsmacros.py)
- #REPEAT(n) ... #END_REPEAT: repeat block, may be nested
- #SET_PLACE_FOR_EVERY_PLAYER / #PLACE8 inside create_object:
  copies the object onto every player land (2 or 8 lands)
- #EXTRACT_RND: moves rnd(min,max) after land generation into random labels
- actor_area <name>: symbolic actor area names
- #BREAK: nothing after this line is written
"""

import os
import re
import sys
import inspect

from rmsmacros import MACROS


class RmsSyntaxError(Exception):
    """
    Exception raised for syntax errors in the RMS+ source.
    """

    def __init__(self, filePath: str, lineCursor: int | None, lineText: str, message: str):
        super().__init__(message)
        self.filePath = filePath
        self.lineCursor = lineCursor
        self.lineText = lineText
        self.message = message

    def __str__(self):
        if self.lineCursor is not None:
            return f'File "{self.filePath}", line {self.lineCursor + 1}\n{self.message}'
        else:
            return f'File "{self.filePath}"\n{self.message}'


# base id of symbolic actor areas, high enough to avoid the ids used by official maps
DEFAULT_ACTOR_AREA_BASE = 20000

# source file extensions picked up when compiling a directory
SUPPORTED_EXTENSIONS = ['.rms', '.rmsp']
# suffix of outputs written next to an .rms source
OUTPUT_SUFFIX = '.out.rms'


def normalizePath(sourceFilePath):
    return os.path.abspath(sourceFilePath.replace('\\', '/'))


class ProcessEnvironment:
    def __init__(self, sourcePath: str = '<string>', arguments: dict | None = None, macros: dict | None = None):
        self.sourcePath = sourcePath
        self.arguments = arguments if arguments is not None else {}
        self.macros = macros if macros is not None else MACROS

        self.actorAreaBase = DEFAULT_ACTOR_AREA_BASE
        if self.containsArgument('ACTOR_AREA_BASE'):
            base = str(self.arguments['ACTOR_AREA_BASE'])
            if not re.match(r'^\d+$', base):
                raise RmsSyntaxError(
                    sourcePath, None, '', f'ACTOR_AREA_BASE must be a non-negative integer: "{base}"')
            self.actorAreaBase = int(base)

        self.sourceLines = []
        self.nextLines = []

    def containsArgument(self, argument: str) -> bool:
        return argument in self.arguments and self.arguments[argument] is not None

    def getArgument(self, argument: str) -> str | None:
        # flags given without '=value' have no value
        value = self.arguments.get(argument)
        return value if isinstance(value, str) else None

    def syntaxError(self, sourceLine: dict, message: str) -> RmsSyntaxError:
        return RmsSyntaxError(self.sourcePath, sourceLine['cursor'], sourceLine['line'], message)


def collectProcessors() -> list:
    # every class in this file with a static process(env) is a pass,
    # run in the order the classes are defined
    processors = []
    classes = [cls for name, cls in globals().items(
    ) if inspect.isclass(cls) and cls.__module__ == __name__]
    for cls in classes:
        for name, method in inspect.getmembers(cls, predicate=inspect.isfunction):
            if name == 'process' and method.__code__.co_argcount == 1:
                processors.append(method)
    return processors


"""
'##::::'##:'########::::'###::::'########::'########:'########::
 ##:::: ##: ##.....::::'## ##::: ##.... ##: ##.....:: ##.... ##:
 ##:::: ##: ##::::::::'##:. ##:: ##:::: ##: ##::::::: ##:::: ##:
 #########: ######:::'##:::. ##: ##:::: ##: ######::: ########::
 ##.... ##: ##...:::: #########: ##:::: ##: ##...:::: ##.. ##:::
 ##:::: ##: ##::::::: ##.... ##: ##:::: ##: ##::::::: ##::. ##::
 ##:::: ##: ########: ##:::: ##: ########:: ########: ##:::. ##:
..:::::..::........::..:::::..::........:::........::..:::::..::
"""


def collectHeaderComment(env: ProcessEnvironment, sourceLines: list[dict]) -> tuple[list[str], list[dict]]:
    """
    Split the lines into (header, rest).
    * header is the text between #HEADER_START and #HEADER_END, when the
      first line is #HEADER_START
    * otherwise header is empty and rest is the input
    """
    if not sourceLines or sourceLines[0]['line'].strip().upper() != '#HEADER_START':
        return [], sourceLines
    header = []
    for index in range(1, len(sourceLines)):
        lineText = sourceLines[index]['line']
        if lineText.strip().upper() == '#HEADER_END':
            return header, sourceLines[index + 1:]
        header.append(lineText)
    raise env.syntaxError(sourceLines[0], 'Header comment never ends, missing #HEADER_END')


"""
:'######:::'#######::'##::::'##:'##::::'##:'########:'##::: ##:'########:
'##... ##:'##.... ##: ###::'###: ###::'###: ##.....:: ###:: ##:... ##..::
 ##:::..:: ##:::: ##: ####'####: ####'####: ##::::::: ####: ##:::: ##::::
 ##::::::: ##:::: ##: ## ### ##: ## ### ##: ######::: ## ## ##:::: ##::::
 ##::::::: ##:::: ##: ##. #: ##: ##. #: ##: ##...:::: ##. ####:::: ##::::
 ##::: ##: ##:::: ##: ##:.:: ##: ##:.:: ##: ##::::::: ##:. ###:::: ##::::
. ######::. #######:: ##:::: ##: ##:::: ##: ########: ##::. ##:::: ##::::
:......::::.......:::..:::::..::..:::::..::........::..::::..:::::..:::::
"""


def stripLineComments(lineText: str, depth: int) -> tuple[str, int]:
    """
    Strip /* */ comments from a single line.
    depth is the comment nesting depth at the start of the line.
    Returns (stripped text, depth at the end of the line).
    * an unbalanced '*/' at depth 0 is kept as text
    """
    result = ''
    while True:
        openIndex = lineText.find('/*')
        closeIndex = lineText.find('*/')
        if openIndex < 0 and closeIndex < 0:
            if depth == 0:
                result += lineText
            return result, depth
        if openIndex >= 0 and (closeIndex < 0 or openIndex < closeIndex):
            if depth == 0:
                result += lineText[:openIndex]
            depth += 1
            lineText = lineText[openIndex + 2:]
        else:
            if depth > 0:
                depth -= 1
            else:
                result += lineText[:closeIndex + 2]
            lineText = lineText[closeIndex + 2:]


class TokenComment:
    @staticmethod
    def process(env: ProcessEnvironment) -> None:
        depth = 0
        for sourceLine in env.sourceLines:
            lineText, depth = stripLineComments(sourceLine['line'], depth)
            env.nextLines.append(
                {'cursor': sourceLine['cursor'], 'line': lineText})


"""
'##:::::'##:'##::::'##:'####:'########:'########::'######::'########:::::'###:::::'######::'########:
 ##:'##: ##: ##:::: ##:. ##::... ##..:: ##.....::'##... ##: ##.... ##:::'## ##:::'##... ##: ##.....::
 ##: ##: ##: ##:::: ##:: ##::::: ##:::: ##::::::: ##:::..:: ##:::: ##::'##:. ##:: ##:::..:: ##:::::::
 ##: ##: ##: #########:: ##::::: ##:::: ######:::. ######:: ########::'##:::. ##: ##::::::: ######:::
 ##: ##: ##: ##.... ##:: ##::::: ##:::: ##...:::::..... ##: ##.....::: #########: ##::::::: ##...::::
 ##: ##: ##: ##:::: ##:: ##::::: ##:::: ##:::::::'##::: ##: ##:::::::: ##.... ##: ##::: ##: ##:::::::
. ###. ###:: ##:::: ##:'####:::: ##:::: ########:. ######:: ##:::::::: ##:::: ##:. ######:: ########:
:...::...:::..:::::..::....:::::..:::::........:::......:::..:::::::::..:::::..:::......:::........::
"""


def condenseLineWhitespace(lineText: str) -> str:
    return ' '.join(lineText.split())


class TokenWhitespace:
    @staticmethod
    def process(env: ProcessEnvironment) -> None:
        for sourceLine in env.sourceLines:
            lineText = condenseLineWhitespace(sourceLine['line'])
            # blank line
            if not lineText:
                continue
            if lineText != sourceLine['line']:
                env.nextLines.append(
                    {'cursor': sourceLine['cursor'], 'line': lineText})
            else:
                env.nextLines.append(sourceLine)


"""
:::::::::'##::::'##::::'###:::::'######::'########:::'#######::
::::::::: ###::'###:::'## ##:::'##... ##: ##.... ##:'##.... ##:
::::::::: ####'####::'##:. ##:: ##:::..:: ##:::: ##: ##:::: ##:
'#######: ## ### ##:'##:::. ##: ##::::::: ########:: ##:::: ##:
........: ##. #: ##: #########: ##::::::: ##.. ##::: ##:::: ##:
::::::::: ##:.:: ##: ##.... ##: ##::: ##: ##::. ##:: ##:::: ##:
::::::::: ##:::: ##: ##:::: ##:. ######:: ##:::. ##:. #######::
:::::::::..:::::..::..:::::..:::......:::..:::::..:::.......:::
"""


class TokenMacro:
    @staticmethod
    def parseArguments(env: ProcessEnvironment, sourceLine: dict, macroInfo: dict) -> list | None:
        """
        Return the numeric arguments of a macro line,
        or None if the line does not have the shape of a call to the macro.
        """
        lineText = sourceLine['line']
        openIndex = lineText.find('(')
        if openIndex < 0:
            return [] if macroInfo['arity'] == 0 else None
        closeIndex = lineText.find(')', openIndex)
        if closeIndex < 0:
            return None
        argsText = lineText[openIndex + 1:closeIndex]
        macroArgs = [arg.strip() for arg in argsText.split(',')] if argsText.strip() else []
        # radius-only macros also take (radius,angle) and ignore the angle
        if len(macroArgs) != macroInfo['arity'] and not (macroInfo['arity'] == 1 and len(macroArgs) == 2):
            return None

        # radius first, then angle
        values = []
        for index, arg in enumerate(macroArgs):
            try:
                if index == 0:
                    values.append(float(arg))
                elif re.match(r'^\+?\d+$', arg):
                    values.append(int(arg))
                else:
                    raise ValueError(arg)
            except ValueError:
                raise env.syntaxError(
                    sourceLine, f'Invalid macro argument "{arg}"')
        return values[:macroInfo['arity']]

    @staticmethod
    def process(env: ProcessEnvironment) -> None:
        for sourceLine in env.sourceLines:
            lineText = sourceLine['line']
            macroName = lineText.split('(', 1)[0].upper()
            macroInfo = env.macros.get(macroName)
            if macroInfo is None:
                env.nextLines.append(sourceLine)
                continue

            macroArgs = TokenMacro.parseArguments(env, sourceLine, macroInfo)
            if macroArgs is None:
                env.nextLines.append(sourceLine)
                continue

            try:
                macroBodyLines = macroInfo['expand'](*macroArgs)
            except ValueError as e:
                raise env.syntaxError(
                    sourceLine, f'Macro "{macroName}" failed: {e}')

            # expanded lines are not scanned for macros again
            for macroLineText in macroBodyLines:
                env.nextLines.append(
                    {'cursor': sourceLine['cursor'], 'line': macroLineText})


"""
'########::'########:'########::'########::::'###::::'########:
 ##.... ##: ##.....:: ##.... ##: ##.....::::'## ##:::... ##..::
 ##:::: ##: ##::::::: ##:::: ##: ##::::::::'##:. ##::::: ##::::
 ########:: ######::: ########:: ######:::'##:::. ##:::: ##::::
 ##.. ##::: ##...:::: ##.....::: ##...:::: #########:::: ##::::
 ##::. ##:: ##::::::: ##:::::::: ##::::::: ##.... ##:::: ##::::
 ##:::. ##: ########: ##:::::::: ########: ##:::: ##:::: ##::::
..:::::..::........::..:::::::::........::..:::::..:::::..:::::
"""


class TokenRepeat:
    @staticmethod
    def parseRepeatCount(env: ProcessEnvironment, sourceLine: dict) -> int:
        lineText = sourceLine['line']
        openIndex = lineText.find('(')
        closeIndex = lineText.rfind(')')
        if closeIndex < openIndex:
            raise env.syntaxError(sourceLine, 'Repeat count is missing ")"')
        countText = lineText[openIndex + 1:closeIndex].strip()
        if not re.match(r'^\d+$', countText):
            raise env.syntaxError(
                sourceLine, f'Repeat count must be a non-negative integer: "{countText}"')
        return int(countText)

    @staticmethod
    def process(env: ProcessEnvironment) -> None:
        # top of the stack is the innermost open #REPEAT
        repeatBlockStack = []
        for sourceLine in env.sourceLines:
            lineText = sourceLine['line']
            # match #REPEAT(n)
            if lineText.upper().startswith('#REPEAT('):
                repeatBlockStack.append({
                    'count': TokenRepeat.parseRepeatCount(env, sourceLine),
                    'opener': sourceLine,
                    'lines': [],
                })
                continue

            # match #END_REPEAT
            if lineText.upper() == '#END_REPEAT':
                if not repeatBlockStack:
                    raise env.syntaxError(
                        sourceLine, '#END_REPEAT found without matching #REPEAT')
                repeatBlock = repeatBlockStack.pop()
                repeatedLines = repeatBlock['lines'] * repeatBlock['count']
                if repeatBlockStack:
                    repeatBlockStack[-1]['lines'] += repeatedLines
                else:
                    env.nextLines += repeatedLines
                continue

            # anything else
            if repeatBlockStack:
                repeatBlockStack[-1]['lines'].append(sourceLine)
            else:
                env.nextLines.append(sourceLine)

        if repeatBlockStack:
            raise env.syntaxError(
                repeatBlockStack[-1]['opener'], '#REPEAT is missing matching #END_REPEAT')


"""
:'#######::'########::::::::'##:'########::'######::'########::'######::
'##.... ##: ##.... ##::::::: ##: ##.....::'##... ##:... ##..::'##... ##:
 ##:::: ##: ##:::: ##::::::: ##: ##::::::: ##:::..::::: ##:::: ##:::..::
 ##:::: ##: ########:::::::: ##: ######::: ##:::::::::: ##::::. ######::
 ##:::: ##: ##.... ##:'##::: ##: ##...:::: ##:::::::::: ##:::::..... ##:
 ##:::: ##: ##:::: ##: ##::: ##: ##::::::: ##::: ##:::: ##::::'##::: ##:
. #######:: ########::. ######:: ########:. ######::::: ##::::. ######::
:.......:::........::::......:::........:::......::::::..::::::......:::
"""


class TokenObjectPlacement:
    """
    #SET_PLACE_FOR_EVERY_PLAYER inside a create_object block copies the
    object once per player land (1 and 2), assigning each copy to its land
    with place_on_specific_land_id. #PLACE8 does the same for lands 1 to 8.
    """
    EVERY_PLAYER_FLAGS = {
        '#SET_PLACE_FOR_EVERY_PLAYER': 2,
        '#PLACE8': 8,
    }

    @staticmethod
    def process(env: ProcessEnvironment) -> None:
        objectLines = None
        numPlayers = None
        for sourceLine in env.sourceLines:
            lineText = sourceLine['line']
            flagPlayers = TokenObjectPlacement.EVERY_PLAYER_FLAGS.get(lineText.upper())

            # outside of create_object
            if objectLines is None:
                if flagPlayers is not None:
                    raise env.syntaxError(
                        sourceLine, f'{lineText} must be used inside a create_object command')
                if lineText.startswith('create_object'):
                    objectLines = [sourceLine]
                else:
                    env.nextLines.append(sourceLine)
                continue

            # every player flag
            if flagPlayers is not None:
                numPlayers = flagPlayers
                continue

            # end of create_object
            if lineText == '}':
                if numPlayers is None:
                    env.nextLines += objectLines
                    env.nextLines.append(sourceLine)
                else:
                    for landId in range(1, numPlayers + 1):
                        env.nextLines += objectLines
                        env.nextLines.append(
                            {'cursor': sourceLine['cursor'], 'line': f'place_on_specific_land_id {landId}'})
                        env.nextLines.append(sourceLine)
                objectLines = None
                numPlayers = None
                continue

            # anything else
            objectLines.append(sourceLine)

        if objectLines is not None:
            raise env.syntaxError(
                objectLines[0], 'create_object is not closed, missing "}"')


"""
'########::'##::: ##:'########::
 ##.... ##: ###:: ##: ##.... ##:
 ##:::: ##: ####: ##: ##:::: ##:
 ########:: ## ## ##: ##:::: ##:
 ##.. ##::: ##. ####: ##:::: ##:
 ##::. ##:: ##:. ###: ##:::: ##:
 ##:::. ##: ##::. ##: ########::
..:::::..::..::::..::........:::
"""


def probs(n: int, m: int) -> list[int]:
    """
    Divide n into m parts that differ by at most 1.
    The first (n % m) parts get the extra unit.
    """
    q, r = divmod(n, m)
    return [q + 1] * r + [q] * (m - r)


def nextLabel(label: str | None) -> str:
    """
    Return the label succeeding label, or the first label if label is None.
    Example:
    - None -> _A
    - _A -> _B
    - _Z -> _ZA
    - _ZB -> _ZC
    * scripts should not start their own labels with an underscore
    """
    if label is None:
        return '_A'
    if label[-1] == 'Z':
        return f'{label}A'
    return f'{label[:-1]}{chr(ord(label[-1]) + 1)}'


def probDefinitions(label: str, minValue: int, maxValue: int) -> list[str]:
    """
    Random block defining label_0 .. label_k, one per value of min..max.
    """
    lines = ['start_random']
    for index, percent in enumerate(probs(100, maxValue + 1 - minValue)):
        lines.append(f'percent_chance {percent} #define {label}_{index}')
    lines.append('end_random')
    return lines


def probConditional(label: str, instruction: str, minValue: int, maxValue: int) -> list[str]:
    lines = []
    delim = 'if'
    for index, value in enumerate(range(minValue, maxValue + 1)):
        lines.append(f'{delim} {label}_{index}')
        lines.append(f'{instruction} {value}')
        delim = 'elseif'
    lines.append('endif')
    return lines


class TokenExtractRandom:
    """
    With #EXTRACT_RND, every 'instruction rnd(min,max)' after land generation
    is replaced by an if/elseif chain over labels, and the random block
    defining the labels is put at the start of the script.
    """
    FLAG = '#EXTRACT_RND'
    LAND_END_MARKER = 'ELEVATION_GENERATION'

    @staticmethod
    def process(env: ProcessEnvironment) -> None:
        if all(sourceLine['line'].upper() != TokenExtractRandom.FLAG for sourceLine in env.sourceLines):
            env.nextLines += env.sourceLines
            return

        preambleLines = []
        bodyLines = []
        label = nextLabel(None)
        finishedLand = False
        for sourceLine in env.sourceLines:
            lineText = sourceLine['line']
            if lineText.upper() == TokenExtractRandom.FLAG:
                continue
            if not finishedLand:
                finishedLand = TokenExtractRandom.LAND_END_MARKER in lineText
                bodyLines.append(sourceLine)
                continue

            rndCount = len(re.findall(r'\brnd\(', lineText))
            if rndCount == 0:
                bodyLines.append(sourceLine)
                continue
            if rndCount > 1:
                raise env.syntaxError(
                    sourceLine, 'Only one rnd(min,max) per line can be extracted')

            match = re.match(
                r'^(?P<instruction>\S+)\s+rnd\(\s*(?P<min>\d+)\s*,\s*(?P<max>\d+)\s*\)$', lineText)
            if not match:
                raise env.syntaxError(
                    sourceLine, 'Expected "<instruction> rnd(min,max)"')
            instruction = match.group('instruction')
            minValue = int(match.group('min'))
            maxValue = int(match.group('max'))
            if minValue >= maxValue:
                raise env.syntaxError(
                    sourceLine, f'rnd({minValue},{maxValue}) requires min < max')
            if maxValue - minValue >= 100:
                raise env.syntaxError(
                    sourceLine, f'rnd({minValue},{maxValue}) has more than 100 outcomes')

            for definitionText in probDefinitions(label, minValue, maxValue):
                preambleLines.append(
                    {'cursor': sourceLine['cursor'], 'line': definitionText})
            for conditionalText in probConditional(label, instruction, minValue, maxValue):
                bodyLines.append(
                    {'cursor': sourceLine['cursor'], 'line': conditionalText})
            label = nextLabel(label)

        env.nextLines += preambleLines
        env.nextLines += bodyLines


"""
:::'###:::::'######::'########::'#######::'########::::::::'###::::'########::'########::::'###::::
::'## ##:::'##... ##:... ##..::'##.... ##: ##.... ##::::::'## ##::: ##.... ##: ##.....::::'## ##:::
:'##:. ##:: ##:::..::::: ##:::: ##:::: ##: ##:::: ##:::::'##:. ##:: ##:::: ##: ##::::::::'##:. ##::
'##:::. ##: ##:::::::::: ##:::: ##:::: ##: ########:::::'##:::. ##: ########:: ######:::'##:::. ##:
 #########: ##:::::::::: ##:::: ##:::: ##: ##.. ##:::::: #########: ##.. ##::: ##...:::: #########:
 ##.... ##: ##::: ##:::: ##:::: ##:::: ##: ##::. ##::::: ##.... ##: ##::. ##:: ##::::::: ##.... ##:
 ##:::: ##:. ######::::: ##::::. #######:: ##:::. ##:::: ##:::: ##: ##:::. ##: ########: ##:::: ##:
..:::::..:::......::::::..::::::.......:::..:::::..:::::..:::::..::..:::::..::........::..:::::..::
"""


class TokenActorArea:
    # commands whose single argument is an actor area
    REFERENCE_COMMANDS = ['actor_area', 'avoid_actor_area', 'actor_area_to_place_in']

    @staticmethod
    def findDeclaredName(lineText: str) -> str | None:
        """
        Return the actor area name declared by the line, if any:
        - actor_area <name>
        - create_actor_area <x> <y> <name> <radius>
        - create_actor_area <x> <y> <name>
        """
        words = lineText.split(' ')
        if words[0] == 'actor_area' and len(words) == 2:
            return words[1]
        if words[0] == 'create_actor_area' and len(words) in (4, 5):
            return words[3]
        return None

    @staticmethod
    def process(env: ProcessEnvironment) -> None:
        # first pass: assign ids in order of first declaration
        # numbers are already ids, named areas must not reuse them
        declaredNames = []
        usedIds = set()
        for sourceLine in env.sourceLines:
            words = sourceLine['line'].split(' ')
            declaredName = TokenActorArea.findDeclaredName(sourceLine['line'])
            referencedName = None
            if words[0] in TokenActorArea.REFERENCE_COMMANDS and len(words) == 2:
                referencedName = words[1]
            for name in (declaredName, referencedName):
                if name is not None and re.match(r'^-?\d+$', name):
                    usedIds.add(int(name))
            if declaredName is not None and not re.match(r'^-?\d+$', declaredName):
                declaredNames.append(declaredName)

        actorAreas = {}
        nextId = env.actorAreaBase
        for name in declaredNames:
            if name in actorAreas:
                continue
            while nextId in usedIds:
                nextId += 1
            actorAreas[name] = nextId
            nextId += 1

        # second pass: replace names with ids
        # names never declared (built-in areas) are kept as they are
        for sourceLine in env.sourceLines:
            words = sourceLine['line'].split(' ')
            if words[0] in TokenActorArea.REFERENCE_COMMANDS and len(words) == 2 and words[1] in actorAreas:
                words[1] = str(actorAreas[words[1]])
            elif words[0] == 'create_actor_area' and len(words) in (4, 5) and words[3] in actorAreas:
                words[3] = str(actorAreas[words[3]])
            else:
                env.nextLines.append(sourceLine)
                continue
            env.nextLines.append(
                {'cursor': sourceLine['cursor'], 'line': ' '.join(words)})


"""
'##:::::'##:'########::'####:'########:'########:
 ##:'##: ##: ##.... ##:. ##::... ##..:: ##.....::
 ##: ##: ##: ##:::: ##:: ##::::: ##:::: ##:::::::
 ##: ##: ##: ########::: ##::::: ##:::: ######:::
 ##: ##: ##: ##.. ##:::: ##::::: ##:::: ##...::::
 ##: ##: ##: ##::. ##::: ##::::: ##:::: ##:::::::
. ###. ###:: ##:::. ##:'####:::: ##:::: ########:
:...::...:::..:::::..::....:::::..:::::........::
"""


def writeUntilBreak(lines: list[str]) -> str:
    """
    Join the lines with newlines, no trailing newline.
    Stops before the first line containing #BREAK.
    """
    finalLines = []
    for lineText in lines:
        if '#BREAK' in lineText.upper():
            break
        finalLines.append(lineText)
    return '\n'.join(finalLines)


def processLines(sourceLines: list[str], env: ProcessEnvironment) -> list[str]:
    """
    Run every pass over the lines of a single script.
    Returns the header lines followed by the processed lines.
    """
    records = [{'cursor': sourceCursor, 'line': sourceLine}
               for sourceCursor, sourceLine in enumerate(sourceLines)]
    header, env.sourceLines = collectHeaderComment(env, records)
    for processor in collectProcessors():
        env.nextLines = []
        processor(env)
        env.sourceLines = env.nextLines
    return header + [sourceLine['line'] for sourceLine in env.sourceLines]


def processScript(text: str, sourcePath: str = '<string>', arguments: dict | None = None) -> str:
    env = ProcessEnvironment(sourcePath, arguments)
    return writeUntilBreak(processLines(text.splitlines(), env))


"""
:'######:::'#######::'##::::'##:'########::'####:'##:::::::'########:
'##... ##:'##.... ##: ###::'###: ##.... ##:. ##:: ##::::::: ##.....::
 ##:::..:: ##:::: ##: ####'####: ##:::: ##:: ##:: ##::::::: ##:::::::
 ##::::::: ##:::: ##: ## ### ##: ########::: ##:: ##::::::: ######:::
 ##::::::: ##:::: ##: ##. #: ##: ##.....:::: ##:: ##::::::: ##...::::
 ##::: ##: ##:::: ##: ##:.:: ##: ##::::::::: ##:: ##::::::: ##:::::::
. ######::. #######:: ##:::: ##: ##::::::::'####: ########: ########:
:......::::.......:::..:::::..::..:::::::::....::........::........::
"""


def isSourceFile(filePath: str) -> bool:
    # skip outputs of an earlier run written next to their sources
    if filePath.endswith(OUTPUT_SUFFIX):
        return False
    return any(filePath.endswith(ext) for ext in SUPPORTED_EXTENSIONS)


def findSourceFiles(entryPath: str) -> list[str]:
    if not os.path.isdir(entryPath):
        return [entryPath]
    sourcePaths = []
    for root, dirs, files in os.walk(entryPath):
        for file in files:
            # x.rms next to x.rmsp is the output of an earlier run
            stem, ext = os.path.splitext(file)
            if ext == '.rms' and f'{stem}.rmsp' in files:
                continue
            if isSourceFile(file):
                sourcePaths.append(normalizePath(os.path.join(root, file)))
    return sorted(sourcePaths)


def getOutputPath(sourcePath: str, env: ProcessEnvironment) -> str:
    """
    Output file of a source file:
    - TC_OUT=<dir> for files named TC*, if given
    - OUT=<dir>, if given
    - otherwise the directory of the source file
    * the extension becomes .rms, and .out.rms if that is the source itself
    """
    fileName = os.path.basename(sourcePath)
    outputDir = env.getArgument('OUT')
    if fileName.startswith('TC') and env.getArgument('TC_OUT'):
        outputDir = env.getArgument('TC_OUT')
    if outputDir is None:
        outputDir = os.path.dirname(sourcePath)
    stem = os.path.splitext(fileName)[0]
    finalPath = normalizePath(os.path.join(outputDir, f'{stem}.rms'))
    if finalPath == normalizePath(sourcePath):
        finalPath = normalizePath(os.path.join(outputDir, f'{stem}{OUTPUT_SUFFIX}'))
    return finalPath


def compile():
    # if there is no argument, print usage
    if len(sys.argv) < 2:
        print("Usage: python rmsp.py <source_path>")
        print("Usage: python rmsp.py <source_path> OUT=<dir> TC_OUT=<dir> ACTOR_AREA_BASE=20000 QUIET")
        sys.exit(1)

    # use the first argument as the source path
    entryPath = normalizePath(sys.argv[1])

    # use other arguments as the options tag
    arguments = {}
    for option in sys.argv[2:]:
        # if option format is a=b, split it into a and b
        if '=' in option:
            option = option.split('=')
            # option name is option[0], option value is other parts joined by '='
            arguments[option[0]] = '='.join(option[1:])
        else:
            # else, set the option as True
            arguments[option] = True
    verbose = 'QUIET' not in arguments

    if not os.path.exists(entryPath):
        print(f'No such File "{entryPath}"')
        sys.exit(1)
    sourcePaths = findSourceFiles(entryPath)

    # print env
    if verbose:
        processors = collectProcessors()
        print(f'Environment:')
        print(f'  Source Path: "{entryPath}"')
        print(f'  Arguments: {arguments}')
        print(f'  Processors: {len(processors)}')
        for index, processor in enumerate(processors):
            print(f'    {processor.__qualname__}() ({index + 1})')
        print(f'  Source files: {len(sourcePaths)}')
        for index, sourcePath in enumerate(sourcePaths):
            print(f'    File "{sourcePath}" ({index + 1})')

    finalPaths = []
    for sourcePath in sourcePaths:
        # read and process the whole file before anything is written
        with open(sourcePath, 'r', encoding='utf-8') as file:
            codeBody = file.read()
        try:
            env = ProcessEnvironment(sourcePath, arguments)
            finalText = writeUntilBreak(processLines(codeBody.splitlines(), env))
        except RmsSyntaxError as e:
            print(f'Syntax Error (most recent call last):')
            print(f'  {e}')
            sys.exit(1)

        finalPath = getOutputPath(sourcePath, env)
        os.makedirs(os.path.dirname(finalPath), exist_ok=True)
        with open(finalPath, 'w', encoding='utf-8') as file:
            file.write(finalText)
        finalPaths.append(finalPath)

    if verbose:
        print(f'Compiled:')
        for finalPath in finalPaths:
            print(f'  File "{finalPath}"')


"""
'##::::'##::::'###::::'####:'##::: ##:
 ###::'###:::'## ##:::. ##:: ###:: ##:
 ####'####::'##:. ##::: ##:: ####: ##:
 ## ### ##:'##:::. ##:: ##:: ## ## ##:
 ##. #: ##: #########:: ##:: ##. ####:
 ##:.:: ##: ##.... ##:: ##:: ##:. ###:
 ##:::: ##: ##:::: ##:'####: ##::. ##:
..:::::..::..:::::..::....::..::::..::
"""

if __name__ == "__main__":
    compile()
