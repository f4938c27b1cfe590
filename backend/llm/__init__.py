# LLM client and prompts
