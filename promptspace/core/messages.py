"""User-facing error messages for the workspace core."""

# Teams
TEAM_NOT_FOUND = "Team not found"
TEAM_NAME_REQUIRED = "Team name is required"
TEAM_ACCESS_DENIED = "You are not a member of this team"
TEAM_INSUFFICIENT_PERMISSIONS = "Insufficient permissions"
TEAM_DELETE_OWNER_ONLY = "Only the team owner can delete the team"

# Membership
MEMBER_NOT_FOUND = "Member not found"
MEMBER_ALREADY_EXISTS = "User is already a team member"
MEMBER_CANNOT_CHANGE_OWNER_ROLE = "Cannot change owner role"
MEMBER_ONLY_OWNER_ASSIGNS_OWNER = "Only owner can assign owner role"
MEMBER_CANNOT_REMOVE_OWNER = "Cannot remove team owner"
MEMBER_LAST_OWNER_CANNOT_LEAVE = "Transfer ownership to another member before leaving the team"

# Categories
CATEGORY_NOT_FOUND = "Category not found"
CATEGORY_NAME_EXISTS = "Category name already exists in this scope"
CATEGORY_TEAM_REQUIRED = "Team ID is required for team categories"
CATEGORY_DEFAULT_UNDELETABLE = "Cannot delete the default uncategorized category"
CATEGORY_DEFAULT_RENAME = "The default category cannot be renamed, and no category can take its name"

# Projects
PROJECT_NOT_FOUND = "Project not found"

# Prompts
PROMPT_NOT_FOUND = "Prompt not found"
VERSION_NOT_FOUND = "Version not found"
VERSION_CONFLICT = "Prompt has been modified by another process"
VERSION_NOT_INCREASING = "Version {next_version} is not greater than current version {current_version}"
VERSION_INITIAL_CHANGE_LOG = "Initial version"
VERSION_REVERT_CHANGE_LOG = "Reverted to version {version}"
VERSION_FORK_CHANGE_LOG = "Forked from prompt {prompt_id} (version {version})"

# General
ERROR_NOT_FOUND = "Resource not found"
ERROR_PERMISSION_DENIED = "Permission denied"
ERROR_CONFLICT = "Resource already exists"
ERROR_VALIDATION = "Validation failed"
ERROR_INTERNAL = "Internal server error"
