"""Tag vocabulary recognised in assistant output.

Names are case-sensitive and form a literal contract with the prompts that
teach a model to propose actions.

Block tags carry a body and must be closed with ``</name>``. Attribute tags
carry everything in their attributes; they may be self-closing
(``<name ... />``) or left open, and any matching closing tag is ignored so
that wrapper tags such as ``proposed_actions`` never hide the tags inside them.
"""

FILE_REPLACE_SUBSTRING = "proposed_file_replace_substring"
FILE_REPLACE = "proposed_file_replace"
FILE_INSERT = "proposed_file_insert"
SHELL_COMMAND = "proposed_shell_command"
PACKAGE_INSTALL = "proposed_package_install"
WORKSPACE_TOOL_NUDGE = "proposed_workspace_tool_nudge"
WORKFLOW_CONFIGURATION = "proposed_workflow_configuration"
DEPLOYMENT_CONFIGURATION = "proposed_deployment_configuration"
ACTIONS_SUMMARY = "proposed_actions"

OLD_STR = "old_str"
NEW_STR = "new_str"

# Attribute names
ATTR_FILE_PATH = "file_path"
ATTR_WORKING_DIRECTORY = "working_directory"
ATTR_IS_DANGEROUS = "is_dangerous"
ATTR_LANGUAGE = "language"
ATTR_PACKAGE_LIST = "package_list"
ATTR_TOOL_NAME = "tool_name"
ATTR_REASON = "reason"
ATTR_WORKFLOW_NAME = "workflow_name"
ATTR_SET_RUN_BUTTON = "set_run_button"
ATTR_MODE = "mode"
ATTR_BUILD_COMMAND = "build_command"
ATTR_RUN_COMMAND = "run_command"
ATTR_SUMMARY = "summary"

BLOCK_TAGS = frozenset(
    {
        FILE_REPLACE_SUBSTRING,
        FILE_REPLACE,
        FILE_INSERT,
        SHELL_COMMAND,
        WORKFLOW_CONFIGURATION,
    }
)

ATTRIBUTE_TAGS = frozenset(
    {
        PACKAGE_INSTALL,
        WORKSPACE_TOOL_NUDGE,
        DEPLOYMENT_CONFIGURATION,
        ACTIONS_SUMMARY,
    }
)

KNOWN_TAGS = BLOCK_TAGS | ATTRIBUTE_TAGS

# Inline knowledge-source reference: [label](rag://id)
RAG_SCHEME = "rag://"
RAG_LINK_MARKER = "](" + RAG_SCHEME

TRUE_VALUE = "true"
