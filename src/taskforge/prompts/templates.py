"""Prompt and message templates for the task pipeline."""

# =============================================================================
# IMPLEMENTATION PROMPT
# =============================================================================

IMPLEMENTATION_PROMPT = """You are an expert {framework} developer working on this repository.

**Project Information:**
- Framework: {framework}
- Language: {language}
- Styling: {styling}
- Current files:
{file_listing}

**Task Details:**
- Issue: #{issue_number}
- Title: {title}
- Type: {task_type}
- Priority: {priority}
- Description: {description}
{requirements_line}
**Instructions:**
1. Analyze the task and determine what files need to be created or modified
2. Generate complete, production-ready code
3. Follow {framework} best practices and {language} standards
4. Keep the implementation consistent with the existing files listed above

**Response Format:**
Respond with VALID JSON ONLY using this structure:

{{
  "analysis": "Brief explanation of the implementation approach",
  "files": [
    {{
      "path": "relative/path/to/file",
      "action": "create",
      "content": "COMPLETE_FILE_CONTENT_HERE",
      "explanation": "Purpose and functionality of this file"
    }}
  ],
  "instructions": "Setup or deployment instructions if needed"
}}

**Critical Requirements:**
- Use double quotes for all JSON strings
- Escape newlines as \\n in content
- Escape quotes as \\" in content
- Escape backslashes as \\\\ in content
- No trailing commas
- No text before or after the JSON object
- Paths are relative to the repository root
- "action" is either "create" or "modify"

{few_shot_examples}"""


# =============================================================================
# ISSUE COMMENTS
# =============================================================================

START_COMMENT = """{marker}

I've been assigned to work on this task. I'll analyze the requirements and create a pull request with the implementation.

**Task Analysis:**
- **Title:** {title}
- **Type:** {task_type}
- **Priority:** {priority}
- **Status:** In Progress 🔄

**Next Steps:**
1. 🔍 Analyze project structure and requirements
2. 🧠 Generate the implementation
3. 📝 Create a pull request with the changes
4. ✅ Provide implementation notes

I'll update this issue with a link to the pull request when it is ready for review."""


FAILURE_COMMENT = """❌ **AI Agent Processing Failed**

I encountered an error while processing this task.

**Failure category:** {category}
**Details:** {error}

**Next Steps:**
1. Review the error logs for this run
2. Fix any configuration issues
3. Re-trigger by adding the `{trigger_label}` label or mentioning `{mention}`

If the issue persists, please manually review the requirements and try again."""


COMPLETION_COMMENT = """✅ **AI Agent Implementation Ready**

I've opened pull request #{pr_number} with the implementation: {pr_url}

**Files changed:** {files_modified}

Please review the changes before merging."""


# =============================================================================
# PULL REQUEST
# =============================================================================

PR_BODY = """## 🤖 AI Generated Implementation

Resolves #{issue_number}

### Analysis
{analysis}

### Files Changed
{file_list}

### Setup Instructions
{instructions}

---
See `AI_IMPLEMENTATION.md` for the full implementation summary."""


IMPLEMENTATION_SUMMARY = """# AI Implementation Summary

## Task Information
- **Issue:** #{issue_number}
- **Title:** {title}
- **Type:** {task_type}
- **Priority:** {priority}
- **Generated:** {timestamp}

## Implementation Analysis
{analysis}

## Files Modified ({files_modified})
{file_list}

## Setup Instructions
{instructions}

## Next Steps
1. Review the generated code for quality and correctness
2. Test the implementation locally
3. Deploy by merging the pull request
"""


# =============================================================================
# REVIEWS
# =============================================================================

APPROVE_REVIEW = "🤖 Automated approval based on evaluation criteria. Score: {score}%"

REQUEST_CHANGES_REVIEW = """🤖 Automated review requires changes:

{reasoning}

Required actions:
{required_actions}"""
