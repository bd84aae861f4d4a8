"""Optional integrations that contribute analyzers of their own."""