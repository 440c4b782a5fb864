"""Built-in problem catalog.

Problems are static; a duel only ever stores the problem id and resolves
it through :func:`get_problem`.
"""
import random
from typing import List, Optional

from codeduel.models import ANY_DIFFICULTY, Problem, TestCase


PROBLEMS: List[Problem] = [
    Problem(
        id='two-sum',
        title='Two Sum',
        difficulty='easy',
        description=(
            'Given an array of integers nums and an integer target, return indices of the '
            'two numbers such that they add up to target.'
        ),
        examples=[{
            'input': 'nums = [2,7,11,15], target = 9',
            'output': '[0,1]',
            'explanation': 'Because nums[0] + nums[1] == 9, we return [0, 1].',
        }],
        constraints=['2 <= nums.length <= 10^4', '-10^9 <= nums[i] <= 10^9'],
        test_cases=[
            TestCase('[2,7,11,15]\n9', '[0,1]'),
            TestCase('[3,2,4]\n6', '[1,2]', is_hidden=True),
            TestCase('[3,3]\n6', '[0,1]', is_hidden=True),
        ],
        starter_code={
            'javascript': 'function twoSum(nums, target) {\n  // Your code here\n  return [];\n}',
            'python': 'def two_sum(nums, target):\n    # Your code here\n    return []',
            'java': 'class Solution {\n    public int[] twoSum(int[] nums, int target) {\n'
                    '        // Your code here\n        return new int[0];\n    }\n}',
        },
    ),
    Problem(
        id='valid-parentheses',
        title='Valid Parentheses',
        difficulty='easy',
        description=(
            "Given a string s containing just the characters '(', ')', '{', '}', '[' and ']', "
            'determine if the input string is valid.'
        ),
        examples=[{'input': 's = "()[]{}"', 'output': 'true'}],
        constraints=['1 <= s.length <= 10^4'],
        test_cases=[
            TestCase('()[]{}', 'true'),
            TestCase('(]', 'false', is_hidden=True),
            TestCase('{[()]}', 'true', is_hidden=True),
        ],
        starter_code={
            'javascript': 'function isValid(s) {\n  // Your code here\n  return false;\n}',
            'python': 'def is_valid(s):\n    # Your code here\n    return False',
            'java': 'class Solution {\n    public boolean isValid(String s) {\n'
                    '        // Your code here\n        return false;\n    }\n}',
        },
    ),
    Problem(
        id='longest-substring',
        title='Longest Substring Without Repeating Characters',
        difficulty='medium',
        description='Given a string s, find the length of the longest substring without repeating characters.',
        examples=[{'input': 's = "abcabcbb"', 'output': '3', 'explanation': 'The answer is "abc".'}],
        constraints=['0 <= s.length <= 5 * 10^4'],
        test_cases=[
            TestCase('abcabcbb', '3'),
            TestCase('bbbbb', '1', is_hidden=True),
            TestCase('pwwkew', '3', is_hidden=True),
        ],
        starter_code={
            'javascript': 'function lengthOfLongestSubstring(s) {\n  // Your code here\n  return 0;\n}',
            'python': 'def length_of_longest_substring(s):\n    # Your code here\n    return 0',
            'java': 'class Solution {\n    public int lengthOfLongestSubstring(String s) {\n'
                    '        // Your code here\n        return 0;\n    }\n}',
        },
    ),
    Problem(
        id='merge-intervals',
        title='Merge Intervals',
        difficulty='medium',
        description='Given an array of intervals, merge all overlapping intervals.',
        examples=[{'input': 'intervals = [[1,3],[2,6],[8,10]]', 'output': '[[1,6],[8,10]]'}],
        constraints=['1 <= intervals.length <= 10^4'],
        test_cases=[
            TestCase('[[1,3],[2,6],[8,10],[15,18]]', '[[1,6],[8,10],[15,18]]'),
            TestCase('[[1,4],[4,5]]', '[[1,5]]', is_hidden=True),
            TestCase('[[1,4],[0,0]]', '[[0,0],[1,4]]', is_hidden=True),
        ],
        starter_code={
            'javascript': 'function merge(intervals) {\n  // Your code here\n  return [];\n}',
            'python': 'def merge(intervals):\n    # Your code here\n    return []',
            'java': 'class Solution {\n    public int[][] merge(int[][] intervals) {\n'
                    '        // Your code here\n        return new int[0][];\n    }\n}',
        },
    ),
    Problem(
        id='trapping-rain-water',
        title='Trapping Rain Water',
        difficulty='hard',
        description=(
            'Given n non-negative integers representing an elevation map where the width of each '
            'bar is 1, compute how much water it can trap after raining.'
        ),
        examples=[{'input': 'height = [0,1,0,2,1,0,1,3,2,1,2,1]', 'output': '6'}],
        constraints=['1 <= n <= 2 * 10^4', '0 <= height[i] <= 10^5'],
        test_cases=[
            TestCase('[0,1,0,2,1,0,1,3,2,1,2,1]', '6'),
            TestCase('[4,2,0,3,2,5]', '9', is_hidden=True),
            TestCase('[1,0,1]', '1', is_hidden=True),
        ],
        starter_code={
            'javascript': 'function trap(height) {\n  // Your code here\n  return 0;\n}',
            'python': 'def trap(height):\n    # Your code here\n    return 0',
            'java': 'class Solution {\n    public int trap(int[] height) {\n'
                    '        // Your code here\n        return 0;\n    }\n}',
        },
    ),
]

_BY_ID = {p.id: p for p in PROBLEMS}


def list_problems() -> List[Problem]:
    return list(PROBLEMS)


def get_problem(problem_id: Optional[str]) -> Optional[Problem]:
    if not problem_id:
        return None
    return _BY_ID.get(problem_id)


def random_problem(rng=random) -> Problem:
    return rng.choice(PROBLEMS)


def problem_for_difficulty(difficulty: str, rng=random) -> Problem:
    """Pick a random problem of ``difficulty``; ``any`` draws from the whole catalog.

    Falls back to the first problem when the catalog has nothing of the
    requested difficulty.
    """
    if difficulty == ANY_DIFFICULTY:
        return random_problem(rng)
    pool = [p for p in PROBLEMS if p.difficulty == difficulty]
    if not pool:
        return PROBLEMS[0]
    return rng.choice(pool)
