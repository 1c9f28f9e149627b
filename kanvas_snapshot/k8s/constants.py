"""Constants shared by the manifest collector and the submitter."""

# Extensions (lower-case) a directory entry needs to be picked up as a manifest
MANIFEST_EXTENSIONS = (".yaml", ".yml")

# Separator placed between manifest files when they are combined
DOCUMENT_SEPARATOR = "\n---\n"
