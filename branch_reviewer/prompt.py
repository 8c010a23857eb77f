from branch_reviewer.output import CommentType

CATEGORY_GUIDE = {
    CommentType.NITPICK: "Small style issues, small issues in performance (e.g. copying a list when passing the original would work).",
    CommentType.LEFTOVER_DEBUG: "Debug statements, print calls, etc. that were probably left in by mistake.",
    CommentType.UNNECESSARY_COMMENT: (
        "Comments that are not needed, or explain something overly-obvious. Be very strict about this. "
        "Comments that explain what the code does are not needed. The only comments that are needed are "
        "ones provided as documentation for public parts of the API, and those that explain *why* the code "
        "is the way it is (rather than what it does)."
    ),
    CommentType.STYLE_ISSUE: "Style issues that do not fall under the other categories.",
    CommentType.QUESTION: (
        "Questions about the code, or questions that the user should answer before merging "
        "(e.g. have you updated the docs?)."
    ),
    CommentType.ISSUE: "Issues with the code that are not style related.",
    CommentType.SUGGESTION: "Suggestions for improvements.",
    CommentType.IDEA: "Ideas for improvements.",
}

_category_names = ", ".join(f'"{c.value}"' for c in CommentType)
_category_lines = "\n".join(f"{c.value}: {text}" for c, text in CATEGORY_GUIDE.items())

DEFAULT_SYSTEM_PROMPT = f"""\
You are a helpful assistant that reviews code. The types of responses you can leave are {_category_names}. \
Also, redisplay the line of code that you are commenting on and tell the user where that line is in the file. \
Keep in mind that you will not see the entire file, only a diff that shows the sections that changed. \
This means that you may see variables and functions being used without seeing where they are defined. \
You are being invoked on code that compiles and passes all tests (you are simply a last pass sanity check).

{_category_lines}

Remember, the code you are reviewing has already been compiled without errors and passed all tests. \
There is no possibility that the code would not compile, and there are no errors in the code that would \
prevent it from compiling.\
"""


def build_system_prompt(custom: str | None = None) -> str:
    if custom is not None:
        return custom
    return DEFAULT_SYSTEM_PROMPT
