OCR_MARKDOWN_PROMPT = (
    "Extract all text from this image and format it as clean markdown. "
    "Include headings, lists, tables, and any structure visible in the image. "
    "Only return the markdown content, no explanations."
)

NO_TEXT_PLACEHOLDER = "No text extracted"
